"""HubSpot integration layer -- read interface, HTTP client and record schemas.

- CRMSource: Abstract read interface consumed by the extraction core
- HubSpotClient: httpx implementation against the HubSpot v1 REST API
- schemas: Pydantic models for contacts, deals, pipelines and output rows
"""

from src.hubsheets.hubspot.client import HubSpotClient
from src.hubsheets.hubspot.schemas import (
    ContactDetail,
    ContactSearchResult,
    ContactSummary,
    Deal,
    FormattedContact,
    FormSubmission,
    PageCursor,
    PipelineDetail,
    PropertyValue,
    RecentContactsPage,
    StageDetail,
    StopCondition,
)
from src.hubsheets.hubspot.source import CRMSource

__all__ = [
    "CRMSource",
    "HubSpotClient",
    "ContactDetail",
    "ContactSearchResult",
    "ContactSummary",
    "Deal",
    "FormattedContact",
    "FormSubmission",
    "PageCursor",
    "PipelineDetail",
    "PropertyValue",
    "RecentContactsPage",
    "StageDetail",
    "StopCondition",
]
