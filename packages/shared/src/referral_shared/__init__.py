"""Shared schemas and email delivery for the referral intake service."""

from referral_shared.email import (
    EmailConfig,
    EmailSender,
    send_referral_notifications,
)
from referral_shared.schemas import (
    DEFAULT_REFERRAL_STATUS,
    NotificationReport,
    ReferralActivity,
    ReferralMode,
    ReferralOut,
    ReferralSubmission,
    ReferrerOut,
    ReferrerStats,
    StatusUpdate,
    SubmissionData,
    SubmissionResponse,
)

__all__ = [
    "DEFAULT_REFERRAL_STATUS",
    "EmailConfig",
    "EmailSender",
    "NotificationReport",
    "ReferralActivity",
    "ReferralMode",
    "ReferralOut",
    "ReferralSubmission",
    "ReferrerOut",
    "ReferrerStats",
    "StatusUpdate",
    "SubmissionData",
    "SubmissionResponse",
    "send_referral_notifications",
]
