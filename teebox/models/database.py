"""Database setup and session management."""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from teebox.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# Create async engine with SQLite timeout for concurrent access
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    connect_args={"timeout": 30},
)

# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize the database, creating all tables."""
    # Import models to ensure they're registered with Base
    from teebox.models import tournament, market, parlay, settlement, live_stats  # noqa: F401

    async with engine.begin() as conn:
        # Enable WAL mode and busy timeout for concurrent access
        await conn.execute(text("PRAGMA journal_mode=WAL"))
        await conn.execute(text("PRAGMA busy_timeout=30000"))

        await conn.run_sync(Base.metadata.create_all)

        # Indexes for the settlement lookups
        for idx in [
            "CREATE INDEX IF NOT EXISTS ix_parlay_picks_settled_at ON parlay_picks(settled_at)",
            "CREATE INDEX IF NOT EXISTS ix_live_stats_event_round ON live_tournament_stats(event_name, round_num)",
        ]:
            try:
                await conn.execute(text(idx))
            except Exception as e:
                logger.debug(f"Index note: {e}")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
