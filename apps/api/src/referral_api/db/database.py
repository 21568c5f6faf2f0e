"""Database connection and session management.

Provides the async SQLAlchemy engine, the session factory, and the scoped
transaction helper. Engine and factory are built by the app lifespan and
kept on ``app.state``; handlers receive them through dependencies.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def create_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for a (driver-qualified) database URL."""
    if database_url.startswith("sqlite"):
        # SQLite async requires aiosqlite; no pool sizing
        return create_async_engine(database_url, echo=False)

    # PostgreSQL with asyncpg
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Open a session inside one transaction.

    Commits when the block exits normally, rolls back on the first
    exception, and always closes the session.

    Usage:
        async with transaction(session_factory) as session:
            session.add(obj)
    """
    async with session_factory() as session, session.begin():
        yield session


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    Usage:
        @router.get("/referrals")
        async def list_referrals(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables.

    Creates all tables defined in models if they don't exist.
    For production, use Alembic migrations instead.
    """
    # Register models on Base.metadata
    from referral_api.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_database(engine: AsyncEngine) -> bool:
    """Return True if the database answers a trivial query."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True
