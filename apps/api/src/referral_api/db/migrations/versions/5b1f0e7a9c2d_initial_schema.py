"""initial_schema

Revision ID: 5b1f0e7a9c2d
Revises:
Create Date: 2026-10-19 18:40:12.512337

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b1f0e7a9c2d"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create referrers and referrals tables."""
    # Referrers table
    op.create_table(
        "referrers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        # Identity
        sa.Column("email", sa.Text, unique=True, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("phone", sa.Text),
        # Stats
        sa.Column("referral_count", sa.Integer, nullable=False, server_default="0"),
        # Timestamps
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    )
    op.create_index("ix_referrers_email", "referrers", ["email"])

    # Referrals table
    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("referrer_id", sa.Integer, sa.ForeignKey("referrers.id")),
        # Referee details
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("phone", sa.Text),
        # Tracked mode
        sa.Column("field_of_work", sa.Text),
        sa.Column("program", sa.Text),
        # Direct mode
        sa.Column("company", sa.Text),
        sa.Column("message", sa.Text),
        # Tracking
        sa.Column("status", sa.Text, nullable=False, server_default="pending"),
        # Timestamps
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_referrals_referrer_id", "referrals", ["referrer_id"])
    op.create_index("ix_referrals_created_at", "referrals", ["created_at"])
    op.create_index("ix_referrals_status", "referrals", ["status"])


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("referrals")
    op.drop_table("referrers")
