"""Sink module -- forwards formatted contact rows to the destination spreadsheet."""

from src.hubsheets.sheets.sink import (
    DEFAULT_RANGE,
    SHEET_COLUMNS,
    RowSink,
    SheetSink,
    to_sheet_row,
)

__all__ = [
    "DEFAULT_RANGE",
    "SHEET_COLUMNS",
    "RowSink",
    "SheetSink",
    "to_sheet_row",
]
