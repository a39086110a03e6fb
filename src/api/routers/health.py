"""Health check API routes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.api.dependencies import RegistryDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        ...,
        description="Overall health status",
    )
    version: str = Field(
        default="1.0.0",
        description="API version",
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(
        ...,
        description="Overall readiness status",
    )
    ai: str = Field(
        ...,
        description="configured, or fallback when no API key is set",
    )
    repository: str = Field(
        ...,
        description="Results store implementation",
    )
    active_sessions: int = Field(
        ...,
        description="Sessions currently held in memory",
    )


class LivenessResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(
        default="alive",
        description="Liveness status",
    )


@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", version="1.0.0")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness_check(registry: RegistryDep) -> ReadinessResponse:
    """Readiness check.

    The service is ready without an AI key: assessments then run on
    fallback analysis.
    """
    return ReadinessResponse(
        status="ready",
        ai="configured" if registry.insight_client.is_configured else "fallback",
        repository=type(registry.recorder.repository).__name__,
        active_sessions=registry.session_store.session_count,
    )


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> LivenessResponse:
    """Liveness check.

    Always returns alive if the endpoint is reachable.
    """
    return LivenessResponse(status="alive")
