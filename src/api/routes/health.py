"""Health check endpoints."""

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from infrastructure.database.session import get_async_session

logger = structlog.get_logger()

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    """Service status without touching dependencies. Fast and lightweight."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
    responses={503: {"model": HealthResponse}},
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse | ORJSONResponse:
    """
    Readiness check including database connectivity.

    Answers 503 while the database is unreachable so the instance is taken
    out of rotation.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("readiness_check_failed", error=str(e))
        body = HealthResponse(
            status="degraded",
            version=API_VERSION,
            timestamp=datetime.utcnow().isoformat(),
            environment=settings.app_env,
            database="unreachable",
        )
        return ORJSONResponse(status_code=503, content=body.model_dump())

    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
        database="healthy",
    )
