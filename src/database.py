"""Database access for per-guild bot settings.

Only /set_spam_channel reads or writes the database. The engine is
built lazily on first use, inside the running event loop, so the bot
answers interactions and runs purges even while Postgres is down.
"""

import asyncio
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import settings
from src.logging_config import get_logger

logger = get_logger(__name__)

# Health checks give up after this long instead of waiting on the pool
CONNECT_CHECK_TIMEOUT_SECONDS = 3.0

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the engine.

    Settings writes are rare, so the production pool is kept small. Tests
    get a NullPool so no connection outlives its event loop.
    """
    global _engine
    if _engine is None:
        pool_options = (
            {"poolclass": NullPool}
            if settings.testing
            else {"pool_size": 2, "max_overflow": 3, "pool_pre_ping": True}
        )
        _engine = create_async_engine(settings.database_url, **pool_options)
    return _engine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session for one interaction."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(get_engine(), expire_on_commit=False)
    async with _session_maker() as session:
        yield session


async def check_database_connection() -> bool:
    """
    Check if the database is reachable.

    Returns:
        True if a trivial query succeeded within the timeout.
    """
    try:
        async with asyncio.timeout(CONNECT_CHECK_TIMEOUT_SECONDS):
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        logger.warning("Database check failed", error=str(exc) or type(exc).__name__)
        return False
    return True


async def close_database() -> None:
    """Dispose the engine and forget it."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_maker = None
