"""Health check endpoints."""

from typing import Literal

from fastapi import APIRouter, status
from pydantic import BaseModel

from doctrizer.config import settings
from doctrizer.core.redis_client import check_redis_connection
from doctrizer.database import check_database_connection

router = APIRouter()

ComponentStatus = Literal["healthy", "unhealthy"]


class HealthResponse(BaseModel):
    """Service liveness."""

    status: Literal["healthy", "degraded"]
    service: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Liveness plus the state of each backing store."""

    database: ComponentStatus
    redis: ComponentStatus


def _component(ok: bool) -> ComponentStatus:
    return "healthy" if ok else "unhealthy"


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Answer without touching the database or Redis."""
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check() -> DetailedHealthResponse:
    """
    Check Postgres and Redis.

    Booking sessions live in Redis, so a Redis outage reports the service
    as degraded even though search and appointment lists still work.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    return DetailedHealthResponse(
        status="healthy" if db_healthy and redis_healthy else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=_component(db_healthy),
        redis=_component(redis_healthy),
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}
