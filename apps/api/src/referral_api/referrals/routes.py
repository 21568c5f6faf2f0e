"""Referral API routes.

Provides referral submission, listing, lookup, and status updates.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_shared.schemas import (
    ErrorResponse,
    ReferralOut,
    ReferralSubmission,
    StatusUpdate,
    SubmissionData,
    SubmissionResponse,
)

from referral_api.db.database import get_db
from referral_api.db.models import MAX_ROW_ID, Referral
from referral_api.errors import NotFoundError, ValidationError
from referral_api.referrals.intake import ReferralIntake

logger = logging.getLogger("referral-api")

router = APIRouter(prefix="/api/referrals", tags=["Referrals"])

SUBMITTED_MESSAGE = "Referral submitted successfully"
PARTIALLY_NOTIFIED_MESSAGE = (
    "Referral submitted, but some notifications could not be sent"
)

# Ids past the column range can never match a row
ReferralId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def get_intake(request: Request) -> ReferralIntake:
    """Dependency returning the intake built at startup."""
    return request.app.state.intake


# =============================================================================
# Routes
# =============================================================================


@router.post(
    "",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_referral(
    submission: ReferralSubmission,
    intake: ReferralIntake = Depends(get_intake),
):
    """Submit a referral.

    Validates the payload, stores the referrer/referral pair in one
    transaction, then emails the admin and the referee.
    """
    result = await intake.submit(submission)

    message = (
        SUBMITTED_MESSAGE
        if result.notifications.all_sent
        else PARTIALLY_NOTIFIED_MESSAGE
    )

    return SubmissionResponse(
        message=message,
        data=SubmissionData(referrer=result.referrer, referral=result.referral),
        notifications=result.notifications,
    )


@router.get("", response_model=list[ReferralOut])
async def list_referrals(db: AsyncSession = Depends(get_db)):
    """List all referrals with their referrer, newest first."""
    result = await db.execute(
        select(Referral).order_by(Referral.created_at.desc(), Referral.id.desc())
    )
    referrals = result.scalars().all()

    return [ReferralOut.model_validate(referral) for referral in referrals]


@router.get(
    "/{referral_id}",
    response_model=ReferralOut,
    responses={404: {"model": ErrorResponse}},
)
async def get_referral(referral_id: ReferralId, db: AsyncSession = Depends(get_db)):
    """Get one referral with its referrer."""
    referral = await db.get(Referral, referral_id)
    if referral is None:
        raise NotFoundError("Referral not found")

    return ReferralOut.model_validate(referral)


@router.patch(
    "/{referral_id}/status",
    response_model=ReferralOut,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_referral_status(
    referral_id: ReferralId,
    update: StatusUpdate | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Overwrite a referral's status.

    The status is free-form but must be non-empty.
    """
    if update is None or not update.status:
        raise ValidationError("Status is required")

    referral = await db.get(Referral, referral_id)
    if referral is None:
        raise NotFoundError("Referral not found")

    referral.status = update.status
    await db.flush()
    logger.info(f"Referral {referral.id} status set to {referral.status!r}")

    return ReferralOut.model_validate(referral)
