"""API package for the referral intake service.

This FastAPI application orchestrates:
- Referral submission (POST /api/referrals)
- Referrer find-or-create and counting (db)
- Notification emails (referral_shared.email)
"""

from referral_api.main import app, create_app

__all__ = ["app", "create_app"]
