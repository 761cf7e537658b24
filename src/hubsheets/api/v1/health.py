"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready). Readiness reports
which collaborators were configured at startup; it does not call HubSpot or
Google.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.hubsheets.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: 200 when HubSpot is configured, 503 otherwise.

    The Sheets service is optional for readiness since deal lookups and
    contact search work without it.
    """
    checks = {
        "hubspot": "ok" if getattr(request.app.state, "hubspot_client", None) else "missing",
        "sheets": "ok" if getattr(request.app.state, "sheets_service", None) else "missing",
    }
    ready = checks["hubspot"] == "ok"

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
