"""Referrer module."""

from referral_api.referrers.routes import router as referrers_router

__all__ = [
    "referrers_router",
]
