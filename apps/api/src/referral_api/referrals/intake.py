"""Referral intake.

Validates a submission, persists it in one transaction, then sends the
notification emails.

Tracked mode transaction:
1. Find the referrer by email.
2. Create it with referral_count=1, or increment referral_count in SQL and
   overwrite name/phone (last write wins).
3. Create the referral linked to that referrer.
4. Commit; any failure rolls everything back.

Two concurrent first submissions for the same email both miss in step 1;
the unique constraint on referrers.email makes the second insert fail, and
the whole transaction is retried so that it takes the update path.

Emails are sent after commit. By default a failed send is reported in the
response but the submission still succeeds, since the data is already
stored. ``notification_failure_is_error`` restores the legacy behavior of
answering 500 in that case.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from referral_shared.email import EmailSender, send_referral_notifications
from referral_shared.schemas import (
    NotificationReport,
    ReferralMode,
    ReferralOut,
    ReferralSubmission,
    ReferrerOut,
)

from referral_api.db.database import transaction
from referral_api.db.models import Referral, Referrer
from referral_api.errors import DependencyError, ValidationError
from referral_api.referrals.validation import validate_submission

logger = logging.getLogger("referral-intake")

# Total attempts when referrer creation hits the email uniqueness constraint
MAX_TRANSACTION_ATTEMPTS = 3


@dataclass
class IntakeResult:
    """Committed records plus notification outcome."""

    referrer: ReferrerOut | None
    referral: ReferralOut
    notifications: NotificationReport


# =============================================================================
# Store Operations
# =============================================================================


async def find_referrer_by_email(session: AsyncSession, email: str) -> Referrer | None:
    """Look up a referrer by its unique email."""
    result = await session.execute(select(Referrer).where(Referrer.email == email))
    return result.scalar_one_or_none()


async def upsert_referrer(
    session: AsyncSession,
    name: str,
    email: str,
    phone: str | None,
) -> Referrer:
    """Find-or-create the referrer and count one more referral.

    Raises:
        IntegrityError: another transaction created the same email first.
    """
    referrer = await find_referrer_by_email(session, email)

    if referrer is None:
        referrer = Referrer(name=name, email=email, phone=phone, referral_count=1)
        session.add(referrer)
        await session.flush()
        await session.refresh(referrer)
        logger.info(f"Created referrer {referrer.id} for {email}")
        return referrer

    await session.execute(
        update(Referrer)
        .where(Referrer.id == referrer.id)
        .values(
            referral_count=Referrer.referral_count + 1,
            name=name,
            phone=phone,
        )
    )
    await session.refresh(referrer)
    logger.info(
        f"Updated referrer {referrer.id} for {email}: "
        f"referral_count={referrer.referral_count}"
    )
    return referrer


async def create_referral(session: AsyncSession, **values) -> Referral:
    """Insert a referral and load its server-generated columns."""
    referral = Referral(**values)
    session.add(referral)
    await session.flush()
    await session.refresh(referral)
    logger.info(f"Created referral {referral.id} for {referral.email}")
    return referral


# =============================================================================
# Intake
# =============================================================================


class ReferralIntake:
    """Accepts referral submissions for one configured mode."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        email_sender: EmailSender,
        mode: ReferralMode = ReferralMode.TRACKED,
        notification_failure_is_error: bool = False,
    ):
        self.session_factory = session_factory
        self.email_sender = email_sender
        self.mode = mode
        self.notification_failure_is_error = notification_failure_is_error

    async def submit(self, submission: ReferralSubmission) -> IntakeResult:
        """Validate, persist and notify.

        Raises:
            ValidationError: missing fields or malformed email.
            DependencyError: the store failed, or (strict mode) an email failed.
        """
        logger.debug(
            f"Received referral submission: {submission.model_dump(exclude_none=True)}"
        )

        try:
            validate_submission(submission, self.mode)
        except ValidationError as e:
            logger.info(f"Rejected referral submission: {e.message}")
            raise

        referrer, referral = await self._persist(submission)

        notifications = await send_referral_notifications(
            self.email_sender, referral, referrer
        )
        if not notifications.all_sent:
            logger.error(
                f"Referral {referral.id} stored but notifications failed: "
                f"admin={notifications.admin_email_sent}, "
                f"referee={notifications.referee_email_sent}"
            )
            if self.notification_failure_is_error:
                raise DependencyError()

        return IntakeResult(
            referrer=referrer,
            referral=referral,
            notifications=notifications,
        )

    async def _persist(
        self, submission: ReferralSubmission
    ) -> tuple[ReferrerOut | None, ReferralOut]:
        """Run the write transaction, retrying on referrer email conflicts."""
        for attempt in range(1, MAX_TRANSACTION_ATTEMPTS + 1):
            try:
                async with transaction(self.session_factory) as session:
                    return await self._write(session, submission)
            except IntegrityError as e:
                if attempt >= MAX_TRANSACTION_ATTEMPTS:
                    logger.exception(
                        f"Referral transaction failed after {attempt} attempts"
                    )
                    raise DependencyError() from e
                logger.warning(
                    f"Referrer email conflict on attempt {attempt}, retrying: {e.orig}"
                )
            except SQLAlchemyError as e:
                logger.exception("Referral transaction failed")
                raise DependencyError() from e

        # Unreachable: the last attempt either returns or raises
        raise DependencyError()

    async def _write(
        self, session: AsyncSession, submission: ReferralSubmission
    ) -> tuple[ReferrerOut | None, ReferralOut]:
        """Write one submission inside an open transaction."""
        if self.mode == ReferralMode.DIRECT:
            referral = await create_referral(
                session,
                name=submission.name,
                email=submission.email,
                phone=submission.phone,
                company=submission.company,
                message=submission.message,
            )
            return None, ReferralOut.model_validate(referral)

        referrer = await upsert_referrer(
            session,
            name=submission.referrer_name,
            email=submission.referrer_email,
            phone=submission.referrer_phone,
        )
        referral = await create_referral(
            session,
            name=submission.referee_name,
            email=submission.referee_email,
            phone=submission.referee_phone,
            field_of_work=submission.field_of_work,
            program=submission.program,
            referrer_id=referrer.id,
        )
        return ReferrerOut.model_validate(referrer), ReferralOut.model_validate(referral)
