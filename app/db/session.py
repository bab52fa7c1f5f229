"""
Async engine dan session factory untuk audit trail.
SQLite (aiosqlite) untuk single device, PostgreSQL (asyncpg) untuk deployment.
"""

import logging
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Engine options sesuai driver.

    Args:
        database_url: SQLAlchemy async URL

    Returns:
        Keyword arguments untuk create_async_engine
    """
    options: Dict[str, Any] = {"echo": settings.DEBUG}

    if settings.ENVIRONMENT == "test":
        options["poolclass"] = NullPool
        return options

    if database_url.startswith("sqlite"):
        return options

    options.update(
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=3600,
        connect_args={
            "server_settings": {"application_name": settings.APP_NAME},
            "command_timeout": 60,
        },
    )
    return options


def create_engine(database_url: str = settings.DATABASE_URL) -> AsyncEngine:
    """Create async engine untuk database_url."""
    return create_async_engine(database_url, **engine_options(database_url))


engine = create_engine()

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """
    Test koneksi dan buat audit tables yang belum ada.
    """
    # Register models on Base.metadata
    from app.models import VerificationAttempt  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Audit tables ready on {engine.url.get_backend_name()}")


async def close_db() -> None:
    """Dispose engine saat shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")
