"""Pydantic schemas for the referral intake service.

Single source of truth for the JSON contract. Python attributes are
snake_case; the wire format is camelCase (``referrerName``, ``fieldOfWork``,
``referralCount``...), generated by the alias generator on ``CamelModel``.

These schemas are storage-agnostic. The SQLAlchemy models live in
``referral_api.db.models`` and are converted with ``model_validate``.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# =============================================================================
# Constants
# =============================================================================

# Status assigned to every new referral until an operator changes it
DEFAULT_REFERRAL_STATUS: str = "pending"


# =============================================================================
# Enums
# =============================================================================


class ReferralMode(str, Enum):
    """Which payload variant the intake accepts."""

    TRACKED = "tracked"  # Referrer + referee, referrer counted by email
    DIRECT = "direct"  # Single contact with company/message, no referrer


# =============================================================================
# Base Model
# =============================================================================


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Submission (Input from Web)
# =============================================================================


class ReferralSubmission(CamelModel):
    """Referral form submission.

    Every field is optional at the schema level so that presence is checked
    by the intake validator, which reports all missing fields at once with
    human-readable labels. Which fields are required depends on the
    configured ``ReferralMode``.
    """

    # Tracked mode: who is referring
    referrer_name: str | None = None
    referrer_email: str | None = None
    referrer_phone: str | None = None

    # Tracked mode: who is being referred
    referee_name: str | None = None
    referee_email: str | None = None
    referee_phone: str | None = None
    field_of_work: str | None = None
    program: str | None = None

    # Direct mode: single contact
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    message: str | None = None


class StatusUpdate(CamelModel):
    """Request body for a referral status change."""

    status: str | None = None


# =============================================================================
# Responses
# =============================================================================


class ReferrerOut(CamelModel):
    """Referrer as stored."""

    id: int
    name: str
    email: str
    phone: str | None = None
    referral_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReferralOut(CamelModel):
    """Referral as stored, with its owning referrer embedded when present."""

    id: int
    name: str
    email: str
    phone: str | None = None
    field_of_work: str | None = None
    program: str | None = None
    company: str | None = None
    message: str | None = None
    status: str = DEFAULT_REFERRAL_STATUS
    created_at: datetime | None = None
    referrer_id: int | None = None
    referrer: ReferrerOut | None = None


class ReferralActivity(CamelModel):
    """Condensed referral shown in referrer stats."""

    status: str
    program: str | None = None
    created_at: datetime | None = None


class ReferrerStats(ReferrerOut):
    """Referrer with the status/program/creation time of its referrals."""

    referrals: list[ReferralActivity] = []


class NotificationReport(CamelModel):
    """Which post-commit notification emails went out."""

    admin_email_sent: bool = False
    referee_email_sent: bool = False

    @property
    def all_sent(self) -> bool:
        """True when every notification was delivered to the transport."""
        return self.admin_email_sent and self.referee_email_sent


class SubmissionData(CamelModel):
    """Committed records of a submission."""

    referrer: ReferrerOut | None = None
    referral: ReferralOut


class SubmissionResponse(CamelModel):
    """Response body for a successful submission."""

    message: str
    data: SubmissionData
    notifications: NotificationReport


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    database: str
