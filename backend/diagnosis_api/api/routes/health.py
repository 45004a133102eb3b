"""Process Health — liveness plus storage connectivity for the whole backend.

Invariants:
    - GET /health returns 200 when storage answers, 503 otherwise
    - Body always reports services.api and services.database
    - Storage failure details are logged, never returned
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from diagnosis_api.config import Settings, get_settings
from diagnosis_api.core.domain_types import HealthStatus
from diagnosis_api.infrastructure.database import (
    DatabaseSessionManager, get_db_manager,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    request: Request,
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
):
    """Process + storage liveness."""
    db_health = await db_manager.health_check()
    healthy = db_health["status"] == HealthStatus.HEALTHY.value
    if not healthy:
        logger.warning("Health check: database unhealthy")
    return JSONResponse(
        status_code=(
            status.HTTP_200_OK if healthy
            else status.HTTP_503_SERVICE_UNAVAILABLE
        ),
        content={
            "success": healthy,
            "message": (
                "Diagnosis API is running" if healthy
                else "Service unhealthy"
            ),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "version": settings.service_version,
            "services": {
                "api": HealthStatus.HEALTHY.value,
                "database": db_health["status"],
            },
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        },
    )


@router.get("/")
async def service_index(settings: Settings = Depends(get_settings)):
    """Service index — name, version and the public endpoints."""
    return {
        "success": True,
        "message": "Diagnostic Support API",
        "version": settings.service_version,
        "documentation": "/docs",
        "health": "/health",
        "endpoints": {
            "GET /api/diagnoses/{clientId}": "Get latest diagnosis for client",
            "POST /api/diagnoses/{clientId}": "Create or update diagnosis",
            "PUT /api/diagnoses/{id}": "Update diagnosis by ID",
            "GET /api/diagnoses/{clientId}/history": "Get diagnosis history",
            "GET /api/diagnoses/by-id/{id}": "Get diagnosis by ID",
        },
    }
