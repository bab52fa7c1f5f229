"""
Connection dependencies: database session untuk audit trail
dan Redis client untuk state store.
"""

import logging
from typing import AsyncIterator, Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.session import SessionLocal

logger = logging.getLogger(__name__)

_pool: Optional[redis.ConnectionPool] = None


def redis_pool() -> redis.ConnectionPool:
    """Connection pool Redis, dibuat saat pertama kali dipakai."""
    global _pool

    if _pool is None:
        _pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_POOL_SIZE,
            decode_responses=True
        )
        logger.info("Redis connection pool created")

    return _pool


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Session untuk audit trail.
    Perubahan yang belum di-commit di-rollback jika request gagal.
    """
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_redis() -> AsyncIterator[redis.Redis]:
    """Redis client dari shared pool."""
    client = redis.Redis(connection_pool=redis_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    """Tutup pool saat shutdown."""
    global _pool

    if _pool is not None:
        await _pool.disconnect()
        _pool = None
        logger.info("Redis connection pool closed")
