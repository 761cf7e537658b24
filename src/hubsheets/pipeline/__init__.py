"""Extraction pipeline -- paginated contact extraction, enrichment and sinking."""

from src.hubsheets.pipeline.engine import (
    PAGE_SIZE,
    PaginationEngine,
    find_stop_index,
    join_added_at,
)

__all__ = [
    "PAGE_SIZE",
    "PaginationEngine",
    "find_stop_index",
    "join_added_at",
]
