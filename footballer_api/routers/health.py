"""
Probe endpoints: /health for humans and dashboards, /ready and /live for
the orchestrator.
"""

import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from footballer_api.config import settings
from footballer_api.dependencies import get_db
from footballer_api.schemas import HealthResponse, ReadyResponse

router = APIRouter(tags=["Health"])


async def ping_database(db: AsyncSession) -> bool:
    """SELECT 1 under the data-access timeout."""
    try:
        await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=settings.db_query_timeout)
    except (SQLAlchemyError, OSError, asyncio.TimeoutError):
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """
    Service status. Always 200; a lost database shows up as
    status "degraded" with database "unhealthy".
    """
    database_ok = await ping_database(db)

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        version=settings.api_version,
        timestamp=datetime.utcnow(),
        database="healthy" if database_ok else "unhealthy",
        environment=settings.environment,
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> ReadyResponse:
    """Ready to take traffic once PostgreSQL answers."""
    checks = {"database": await ping_database(db)}
    return ReadyResponse(ready=all(checks.values()), checks=checks)


@router.get("/live")
async def liveness_check() -> dict:
    return {"alive": True}
