"""Referral module.

Provides referral intake (validation, transaction, notification) and the
referral query/status routes.
"""

from referral_api.referrals.intake import IntakeResult, ReferralIntake
from referral_api.referrals.routes import router as referrals_router

__all__ = [
    "IntakeResult",
    "ReferralIntake",
    "referrals_router",
]
