"""Health check routes."""

import logging

from fastapi import APIRouter, Response
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.dependencies import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str
    backend: str
    store: str


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is running.",
)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(
        status="healthy",
        version=get_settings().app.version,
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness check",
    description="Check if the record store answers queries.",
    responses={503: {"model": ReadyResponse}},
)
async def readiness_check(store: Store, response: Response) -> ReadyResponse:
    """Return service readiness status."""
    backend = get_settings().database.backend.value
    try:
        reachable = await store.ping()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        reachable = False

    if not reachable:
        response.status_code = 503
        return ReadyResponse(status="not_ready", backend=backend, store="unavailable")

    return ReadyResponse(status="ready", backend=backend, store="connected")


@router.get(
    "/live",
    summary="Liveness check",
    description="Kubernetes liveness probe endpoint.",
)
async def liveness_check() -> dict:
    """Return liveness status."""
    return {"status": "alive"}
