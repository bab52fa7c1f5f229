"""
Liveness dan readiness probes: audit database dan state store.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

import redis.asyncio as redis
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.database import get_db, get_redis
from app.core.config import settings
from app.schemas.response import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


async def check_database(db: AsyncSession) -> Tuple[bool, str]:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Audit database unreachable: {e}")
        return False, f"Error: {e}"
    return True, "Connected"


async def check_state_store(redis_client: redis.Redis) -> Tuple[bool, str]:
    if settings.STATE_BACKEND == "memory":
        return True, "In-memory"
    try:
        await redis_client.ping()
    except Exception as e:
        logger.error(f"State store unreachable: {e}")
        return False, f"Error: {e}"
    return True, "Connected"


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Basic health check."""
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        service=settings.APP_NAME
    )


@router.get("/ready", response_model=Dict[str, Any])
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
) -> Dict[str, Any]:
    """
    Readiness check: audit database dan state store.

    Returns:
        Status per dependency
    """
    database_ok, database_detail = await check_database(db)
    store_ok, store_detail = await check_state_store(redis_client)

    return {
        "status": "healthy" if database_ok and store_ok else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "checks": {"database": database_ok, "state_store": store_ok},
        "details": {"database": database_detail, "state_store": store_detail}
    }


@router.get("/live", status_code=status.HTTP_204_NO_CONTENT)
async def liveness_check() -> None:
    """Liveness probe."""
    return None
