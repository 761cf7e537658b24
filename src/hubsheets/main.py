"""FastAPI application factory.

Creates the app with logging middleware, typed-error handlers, lifespan
events that build the HubSpot and Google Sheets collaborators, and the v1
API router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.hubsheets.api.middleware.logging import LoggingMiddleware
from src.hubsheets.api.v1.router import router as v1_router
from src.hubsheets.config import get_settings
from src.hubsheets.core.exceptions import JoinError, TransportError
from src.hubsheets.core.logging import configure_structlog

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build collaborators on startup."""
    settings = get_settings()
    configure_structlog()

    app.state.hubspot_client = None
    if settings.HUBSPOT_API_KEY:
        from src.hubsheets.hubspot.client import HubSpotClient

        app.state.hubspot_client = HubSpotClient(
            api_key=settings.HUBSPOT_API_KEY,
            base_url=settings.HUBSPOT_BASE_URL,
            timeout=settings.HUBSPOT_TIMEOUT,
        )
        log.info("startup.hubspot_client_initialized", base_url=settings.HUBSPOT_BASE_URL)
    else:
        log.warning("startup.hubspot_not_configured")

    app.state.sheets_service = None
    service_account_path = settings.get_service_account_path()
    if service_account_path:
        from src.hubsheets.services.google import GoogleAuthManager, SheetsService

        app.state.sheets_service = SheetsService(
            auth_manager=GoogleAuthManager(service_account_file=service_account_path)
        )
        log.info("startup.sheets_service_initialized")
    else:
        log.warning("startup.sheets_not_configured")

    yield


async def _transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    log.error(
        "request.transport_error",
        path=request.url.path,
        operation=exc.operation,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": exc.message, **exc.details},
    )


async def _join_error_handler(request: Request, exc: JoinError) -> JSONResponse:
    log.error(
        "request.join_error",
        path=request.url.path,
        entity=exc.entity,
        reference=exc.reference,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, **exc.details},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HubSheets API",
        version="0.1.0",
        description="HubSpot contact extraction and attribution reporting to Google Sheets",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(TransportError, _transport_error_handler)
    app.add_exception_handler(JoinError, _join_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    return app


# Module-level app for uvicorn
app = create_app()
