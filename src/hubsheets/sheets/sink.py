"""Row sinks -- where formatted contacts go after each extraction page.

RowSink is the interface the PaginationEngine appends to. SheetSink maps
FormattedContact rows onto a fixed spreadsheet column order and forwards them
to SheetsService in a single append call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import structlog

from src.hubsheets.hubspot.schemas import FormattedContact
from src.hubsheets.services.google.sheets import SheetsService

logger = structlog.get_logger(__name__)

DEFAULT_RANGE = "Página1"

# Spreadsheet column order, by FormattedContact wire name
SHEET_COLUMNS: tuple[str, ...] = (
    "id",
    "addedAt",
    "institution",
    "utm_source",
    "utm_campaign",
    "hsa_grp",
    "utm_content",
    "ad",
    "hs_url",
)


def to_sheet_row(contact: FormattedContact) -> list[Any]:
    """Flatten a contact into SHEET_COLUMNS order; missing values become ""."""
    row = contact.to_row()
    return [row[column] if row.get(column) is not None else "" for column in SHEET_COLUMNS]


class RowSink(ABC):
    """Destination for formatted contact rows."""

    @abstractmethod
    async def append(self, contacts: list[FormattedContact]) -> None:
        """Append one batch of rows. Failures propagate, nothing is retried."""
        ...


class SheetSink(RowSink):
    """Appends formatted contacts to a Google Sheets range.

    Args:
        sheets: SheetsService used for the append call.
        spreadsheet_id: Target spreadsheet id.
        range_label: Sheet name or A1 range. Defaults to DEFAULT_RANGE.
    """

    def __init__(
        self,
        sheets: SheetsService,
        spreadsheet_id: str,
        range_label: str = DEFAULT_RANGE,
    ) -> None:
        self._sheets = sheets
        self._spreadsheet_id = spreadsheet_id
        self._range_label = range_label

    async def append(self, contacts: list[FormattedContact]) -> None:
        rows = [to_sheet_row(contact) for contact in contacts]
        await self._sheets.append_rows(self._spreadsheet_id, self._range_label, rows)
        logger.info(
            "sheets.rows_appended",
            spreadsheet_id=self._spreadsheet_id,
            range=self._range_label,
            row_count=len(rows),
        )
