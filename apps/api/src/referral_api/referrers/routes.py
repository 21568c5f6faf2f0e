"""Referrer API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from referral_shared.schemas import ErrorResponse, ReferrerStats

from referral_api.db.database import get_db
from referral_api.db.models import MAX_ROW_ID, Referrer
from referral_api.errors import NotFoundError

router = APIRouter(prefix="/api/referrers", tags=["Referrers"])

ReferrerId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


@router.get(
    "/{referrer_id}/stats",
    response_model=ReferrerStats,
    responses={404: {"model": ErrorResponse}},
)
async def get_referrer_stats(
    referrer_id: ReferrerId, db: AsyncSession = Depends(get_db)
):
    """Get a referrer with the status, program and date of each referral."""
    referrer = await db.get(
        Referrer, referrer_id, options=[selectinload(Referrer.referrals)]
    )
    if referrer is None:
        raise NotFoundError("Referrer not found")

    return ReferrerStats.model_validate(referrer)
