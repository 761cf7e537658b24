"""Async Google Sheets service for appending report rows.

Google API calls are blocking, so each one is wrapped in asyncio.to_thread()
to keep the event loop free. HttpError answers become TransportError.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from googleapiclient.errors import HttpError

from src.hubsheets.core.exceptions import TransportError
from src.hubsheets.services.google.auth import GoogleAuthManager

logger = structlog.get_logger(__name__)


class SheetsService:
    """Async wrapper around the Sheets API values.append call."""

    def __init__(self, auth_manager: GoogleAuthManager) -> None:
        self._auth = auth_manager

    async def append_rows(
        self,
        spreadsheet_id: str,
        range_label: str,
        rows: list[list[Any]],
    ) -> dict:
        """Append rows after the last filled row of ``range_label``.

        Args:
            spreadsheet_id: Target spreadsheet id (from the sheet URL).
            range_label: A1 range or sheet name, e.g. "Página1".
            rows: Row values in column order.

        Returns:
            The Sheets API append response (contains ``updates``).

        Raises:
            TransportError: If the Sheets API answers with an error.
        """
        service = self._auth.get_sheets_service()

        def _append() -> dict:
            return (
                service.spreadsheets()
                .values()
                .append(
                    spreadsheetId=spreadsheet_id,
                    range=range_label,
                    valueInputOption="USER_ENTERED",
                    insertDataOption="INSERT_ROWS",
                    body={"values": rows},
                )
                .execute()
            )

        try:
            return await asyncio.to_thread(_append)
        except HttpError as exc:
            status_code = getattr(exc.resp, "status", None)
            logger.error(
                "sheets.append_failed",
                spreadsheet_id=spreadsheet_id,
                status_code=status_code,
            )
            raise TransportError(
                "append_rows",
                str(exc),
                status_code=int(status_code) if status_code else None,
            ) from exc
