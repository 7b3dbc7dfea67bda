# backend/swimdesk/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from ...core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        environment=settings.environment,
    )
