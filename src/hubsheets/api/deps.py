"""FastAPI dependencies that hand endpoints the services created at startup.

Services live on ``app.state`` (set in the lifespan). A service that was not
configured answers 503 instead of failing deeper in the call.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.hubsheets.attribution.resolver import AttributionResolver
from src.hubsheets.config import get_settings
from src.hubsheets.hubspot.source import CRMSource
from src.hubsheets.services.google.sheets import SheetsService


def get_crm_source(request: Request) -> CRMSource:
    """Retrieve the HubSpot client from app.state, 503 if not available."""
    source = getattr(request.app.state, "hubspot_client", None)
    if source is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="HubSpot integration not configured",
        )
    return source


def get_sheets_service(request: Request) -> SheetsService:
    """Retrieve the Sheets service from app.state, 503 if not available."""
    sheets = getattr(request.app.state, "sheets_service", None)
    if sheets is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google Sheets integration not configured",
        )
    return sheets


def get_attribution_resolver() -> AttributionResolver:
    """Build an AttributionResolver for the configured HubSpot portal."""
    return AttributionResolver(portal_id=get_settings().HUBSPOT_PORTAL_ID)
