"""Attribution module -- derives marketing-source fields from contact analytics data."""

from src.hubsheets.attribution.resolver import (
    INSTITUTIONS,
    AttributionResolver,
    format_added_at,
)
from src.hubsheets.attribution.urls import hostname_of, parse_url_params

__all__ = [
    "AttributionResolver",
    "INSTITUTIONS",
    "format_added_at",
    "hostname_of",
    "parse_url_params",
]
