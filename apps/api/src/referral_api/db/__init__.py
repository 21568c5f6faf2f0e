"""Database module for the API.

Provides SQLAlchemy models, async session management, and the scoped
transaction helper.
"""

from referral_api.db.database import (
    Base,
    create_engine,
    create_session_factory,
    get_db,
    init_db,
    ping_database,
    transaction,
)
from referral_api.db.models import Referral, Referrer

__all__ = [
    "Base",
    "Referral",
    "Referrer",
    "create_engine",
    "create_session_factory",
    "get_db",
    "init_db",
    "ping_database",
    "transaction",
]
