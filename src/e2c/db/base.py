"""Database connection and session management."""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from e2c.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Global engine and sessionmaker
engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_args(db_url: str, debug: bool) -> Dict[str, Any]:
    args: Dict[str, Any] = {"echo": debug}
    if db_url.startswith("sqlite"):
        # An in-memory database only exists on one connection
        if ":memory:" in db_url:
            args["poolclass"] = StaticPool
            args["connect_args"] = {"check_same_thread": False}
    else:
        settings = get_settings()
        args["pool_pre_ping"] = True
        args["pool_size"] = settings.db_pool_size
        args["max_overflow"] = settings.db_max_overflow
    return args


async def init_db() -> None:
    """Initialize database connection."""
    global engine, AsyncSessionLocal

    if engine is not None:
        return

    settings = get_settings()
    engine = create_async_engine(
        settings.db_url, **_engine_args(settings.db_url, settings.debug)
    )
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info("Database engine created (%s)", engine.url.get_backend_name())

    # SQLite is only used for tests and local runs; create tables directly
    if settings.db_url.startswith("sqlite"):
        import e2c.db.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connection."""
    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
        engine = None
        AsyncSessionLocal = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    if AsyncSessionLocal is None:
        await init_db()

    assert AsyncSessionLocal is not None

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
