"""Liveness and service health endpoints."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.middleware import get_principal_for_health
from app.core.config import Settings, get_settings

router = APIRouter(tags=["Health"])


class LivenessResponse(BaseModel):
    """Liveness check body."""

    status: Literal["ok"] = "ok"


class HealthResponse(BaseModel):
    """Service identity at the time of the check."""

    status: Literal["healthy"] = "healthy"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    service: str
    version: str


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Unauthenticated liveness check."""
    return LivenessResponse()


@router.get(
    "/healthz",
    response_model=HealthResponse,
    dependencies=[Depends(get_principal_for_health)],
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Report service name and version.

    Anonymous unless ``health.allow_anonymous`` is disabled, in which case the
    usual API key or bearer credentials are required.
    """
    return HealthResponse(service=settings.app_name, version=settings.version)
