"""SQLAlchemy models for referrers and referrals.

A referrer is identified by email and counts its submissions; each
referral belongs to one referrer. In direct mode a referral stands alone,
so the referrer link and the tracked-only columns are nullable.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from referral_shared.schemas import DEFAULT_REFERRAL_STATUS

from referral_api.db.database import Base

# Largest value an Integer primary key can hold on every supported backend
MAX_ROW_ID = 2**31 - 1

# =============================================================================
# Referrer Model
# =============================================================================


class Referrer(Base):
    """Person making referrals, found-or-created by email."""

    __tablename__ = "referrers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)

    # Stats
    referral_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    referrals: Mapped[list["Referral"]] = relationship(
        back_populates="referrer",
        lazy="raise",
        order_by="Referral.id",
    )

    __table_args__ = (Index("ix_referrers_email", "email"),)


# =============================================================================
# Referral Model
# =============================================================================


class Referral(Base):
    """A single referred person, owned by one referrer in tracked mode."""

    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referrer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("referrers.id")
    )

    # Referee details
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)

    # Tracked mode
    field_of_work: Mapped[str | None] = mapped_column(Text)
    program: Mapped[str | None] = mapped_column(Text)

    # Direct mode
    company: Mapped[str | None] = mapped_column(Text)
    message: Mapped[str | None] = mapped_column(Text)

    # Tracking
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_REFERRAL_STATUS
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    referrer: Mapped["Referrer | None"] = relationship(
        back_populates="referrals", lazy="selectin"
    )

    __table_args__ = (
        Index("ix_referrals_referrer_id", "referrer_id"),
        Index("ix_referrals_created_at", "created_at"),
        Index("ix_referrals_status", "status"),
    )
