"""
Health checks for container orchestration.

Liveness (/health, /health/live) never touches the database. The database
check and the readiness check both run a trivial query and answer 503 when
it fails.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from customs_ops.api.deps import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "customs-ops-api"


async def _database_reachable(session: AsyncSession, check: str) -> bool:
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database check failed", exc_info=e, extra={"health_check": check})
        return False
    return True


@router.get("/health")
@router.get("/health/live")
async def liveness():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def database_health(session: AsyncSession = Depends(get_db_session)):
    if await _database_reachable(session, "db"):
        return {"status": "healthy", "component": "database"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unhealthy", "component": "database", "error": "Database connection failed"},
    )


@router.get("/health/ready")
async def readiness(session: AsyncSession = Depends(get_db_session)):
    """Traffic should only be routed here once the database answers."""
    if await _database_reachable(session, "ready"):
        return {"status": "ready", "checks": {"database": "healthy"}}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "checks": {"database": "unhealthy"}},
    )
