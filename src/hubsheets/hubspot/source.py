"""CRM source abstract base class -- the read interface the extraction core depends on.

HubSpotClient is the production implementation. Tests substitute AsyncMock(spec=CRMSource)
or small in-memory fakes, so the core never needs network access.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.hubsheets.hubspot.schemas import (
    ContactDetail,
    ContactSearchResult,
    Deal,
    PipelineDetail,
    RecentContactsPage,
)


class CRMSource(ABC):
    """Abstract interface for CRM read operations.

    Methods:
        fetch_recent_contacts: One page of recently added contacts.
        fetch_contact_details: Full records for a batch of contact ids.
        fetch_deal_associations: Deal ids associated with a contact.
        fetch_deal: One raw (unjoined) deal.
        fetch_deal_pipelines: The full deal-pipeline catalog.
        search_contacts: Free-text contact search.
    """

    @abstractmethod
    async def fetch_recent_contacts(
        self,
        vid_offset: int | None,
        time_offset: int | None,
        page_size: int,
    ) -> RecentContactsPage:
        """Fetch one page of the recent-contacts listing."""
        ...

    @abstractmethod
    async def fetch_contact_details(self, ids: list[int]) -> dict[int, ContactDetail]:
        """Fetch full contact records keyed by vid."""
        ...

    @abstractmethod
    async def fetch_deal_associations(self, contact_id: int) -> list[int]:
        """Return the deal ids associated with a contact, in CRM order."""
        ...

    @abstractmethod
    async def fetch_deal(self, deal_id: int) -> Deal:
        """Fetch a single deal without pipeline/stage attached."""
        ...

    @abstractmethod
    async def fetch_deal_pipelines(self) -> list[PipelineDetail]:
        """Fetch every deal pipeline with its stages."""
        ...

    @abstractmethod
    async def search_contacts(
        self, query: str, count: int = 20, offset: int = 0
    ) -> ContactSearchResult:
        """Search contacts by free text (email, name, company)."""
        ...
