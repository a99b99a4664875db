"""
Health check router.

Provides liveness and readiness probes.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import settings
from ..dependencies import get_repository
from ..domain.entities import utc_now
from ..repositories.request_repository import IItemRequestRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = settings.SERVICE_NAME
    version: str = settings.SERVICE_VERSION


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    Used by load balancers and orchestrators for liveness probes.
    """
    return HealthResponse(status="healthy", timestamp=utc_now().isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if service is ready to accept traffic (database reachable)",
)
async def readiness_check(repository: IItemRequestRepository = Depends(get_repository)):
    """
    Readiness check.

    Returns 200 if the database answers, 503 otherwise.
    """
    database_ok = await repository.ping()
    checks = {"database": "healthy" if database_ok else "unhealthy"}
    response = ReadinessResponse(
        ready=database_ok, checks=checks, timestamp=utc_now().isoformat()
    )

    if not database_ok:
        logger.warning("Readiness check failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )

    return response
