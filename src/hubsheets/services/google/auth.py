"""Google API authentication manager for service account credentials.

Handles credential creation and service instance caching to avoid
redundant credential builds per API request.
"""

from __future__ import annotations

from typing import Any

import structlog
from google.oauth2 import service_account
from googleapiclient.discovery import build

logger = structlog.get_logger(__name__)

SHEETS_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]


class GoogleAuthManager:
    """Manages Google API authentication with service account credentials.

    Caches service instances per API name so repeated appends reuse the
    same discovery document and HTTP connection.

    Args:
        service_account_file: Path to the service account JSON key.
    """

    def __init__(self, service_account_file: str) -> None:
        self._service_account_file = service_account_file
        self._service_cache: dict[str, Any] = {}

    def _build_credentials(self, scopes: list[str]) -> service_account.Credentials:
        """Create service account credentials for the given scopes."""
        return service_account.Credentials.from_service_account_file(
            self._service_account_file,
            scopes=scopes,
        )

    def get_sheets_service(self) -> Any:
        """Get a cached Sheets API v4 service instance.

        Returns:
            Sheets API Resource object.
        """
        cache_key = "sheets"

        if cache_key not in self._service_cache:
            logger.info("building_sheets_service")
            credentials = self._build_credentials(SHEETS_SCOPES)
            service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            self._service_cache[cache_key] = service

        return self._service_cache[cache_key]
