"""Async HTTP client for the HubSpot v1 REST API.

Implements CRMSource with httpx.AsyncClient. Authentication uses the legacy
``hapikey`` query parameter. Every httpx failure, non-JSON body and
unexpected response shape is converted into a TransportError carrying the
operation name and HTTP status, so callers can tell "no data" apart from
"call failed".

Only HTTP 429 (rate limited) answers are retried, with tenacity backoff.
Any other failure surfaces on the first attempt.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from src.hubsheets.core.exceptions import TransportError
from src.hubsheets.hubspot.schemas import (
    AssociationPage,
    ContactDetail,
    ContactSearchResult,
    Deal,
    PipelineCatalog,
    PipelineDetail,
    RecentContactsPage,
)
from src.hubsheets.hubspot.source import CRMSource

logger = structlog.get_logger(__name__)

# HubSpot association type: contact -> deal
CONTACT_TO_DEAL = 4


def _is_rate_limited(exc: BaseException) -> bool:
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code == httpx.codes.TOO_MANY_REQUESTS
    )


_rate_limit_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_is_rate_limited),
    reraise=True,
)


class HubSpotClient(CRMSource):
    """Async client for the HubSpot contacts, deals and pipelines endpoints.

    Args:
        api_key: HubSpot API key (sent as ``hapikey``).
        base_url: API root, e.g. https://api.hubapi.com.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.hubapi.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {"Accept": "application/json"}

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client for one call."""
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    @_rate_limit_retry
    async def _get_json(self, path: str, params: list[tuple[str, Any]]) -> Any:
        async with self._client() as client:
            response = await client.get(
                f"{self._base_url}{path}",
                params=[("hapikey", self._api_key), *params],
            )
            response.raise_for_status()
            return response.json()

    async def _get(
        self,
        operation: str,
        path: str,
        params: list[tuple[str, Any]] | None = None,
    ) -> Any:
        """GET a HubSpot path, translating httpx and decode failures into TransportError."""
        try:
            return await self._get_json(path, params or [])
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(
                "hubspot.request_failed",
                operation=operation,
                path=path,
                status_code=status_code,
            )
            raise TransportError(
                operation,
                f"HTTP {status_code}: {exc.response.text[:200]}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "hubspot.request_failed",
                operation=operation,
                path=path,
                error=str(exc),
            )
            raise TransportError(operation, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:  # body is not JSON
            logger.error("hubspot.invalid_body", operation=operation, path=path)
            raise TransportError(operation, f"Response body is not JSON: {exc}") from exc

    @staticmethod
    def _parse(operation: str, model: Any, data: Any) -> Any:
        """Validate a decoded answer against ``model``; bad shapes become TransportError."""
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as exc:
            logger.error(
                "hubspot.unexpected_shape",
                operation=operation,
                error_count=exc.error_count(),
            )
            raise TransportError(
                operation, f"Unexpected response shape: {exc.errors()[0]['msg']}"
            ) from exc

    async def fetch_recent_contacts(
        self,
        vid_offset: int | None,
        time_offset: int | None,
        page_size: int,
    ) -> RecentContactsPage:
        """GET /contacts/v1/lists/all/contacts/recent.

        Offsets that are None are left out of the query string entirely, which
        HubSpot reads as "start from the most recent contact".
        """
        params: list[tuple[str, Any]] = [("count", page_size)]
        if vid_offset is not None:
            params.append(("vidOffset", vid_offset))
        if time_offset is not None:
            params.append(("timeOffset", time_offset))

        logger.debug(
            "hubspot.fetch_recent_contacts",
            vid_offset=vid_offset,
            time_offset=time_offset,
        )
        data = await self._get(
            "fetch_recent_contacts",
            "/contacts/v1/lists/all/contacts/recent",
            params,
        )
        return self._parse("fetch_recent_contacts", RecentContactsPage, data)

    async def fetch_contact_details(self, ids: list[int]) -> dict[int, ContactDetail]:
        """GET /contacts/v1/contact/vids/batch/ with one ``vid`` param per id."""
        if not ids:
            return {}

        data = await self._get(
            "fetch_contact_details",
            "/contacts/v1/contact/vids/batch/",
            [("vid", vid) for vid in ids],
        )
        details = self._parse("fetch_contact_details", dict[str, ContactDetail], data)
        return {detail.vid: detail for detail in details.values()}

    async def fetch_deal_associations(self, contact_id: int) -> list[int]:
        """GET /crm-associations/v1/associations/{id}/HUBSPOT_DEFINED/4.

        Follows ``hasMore``/``offset`` until every associated deal id is read.
        A page claiming more data without an offset ends the walk.
        """
        deal_ids: list[int] = []
        offset: int | None = None

        while True:
            params: list[tuple[str, Any]] = []
            if offset is not None:
                params.append(("offset", offset))
            data = await self._get(
                "fetch_deal_associations",
                f"/crm-associations/v1/associations/{contact_id}"
                f"/HUBSPOT_DEFINED/{CONTACT_TO_DEAL}",
                params,
            )
            page = self._parse("fetch_deal_associations", AssociationPage, data)
            deal_ids.extend(page.results)
            if not page.has_more:
                break
            if page.offset is None:
                logger.warning(
                    "hubspot.association_offset_missing",
                    contact_id=contact_id,
                    read=len(deal_ids),
                )
                break
            offset = page.offset

        return deal_ids

    async def fetch_deal(self, deal_id: int) -> Deal:
        """GET /deals/v1/deal/{id}."""
        data = await self._get("fetch_deal", f"/deals/v1/deal/{deal_id}")
        return self._parse("fetch_deal", Deal, data)

    async def fetch_deal_pipelines(self) -> list[PipelineDetail]:
        """GET /crm-pipelines/v1/pipelines/deals."""
        data = await self._get(
            "fetch_deal_pipelines", "/crm-pipelines/v1/pipelines/deals"
        )
        return self._parse("fetch_deal_pipelines", PipelineCatalog, data).results

    async def search_contacts(
        self, query: str, count: int = 20, offset: int = 0
    ) -> ContactSearchResult:
        """GET /contacts/v1/search/query."""
        data = await self._get(
            "search_contacts",
            "/contacts/v1/search/query",
            [("q", query), ("count", count), ("offset", offset)],
        )
        return self._parse("search_contacts", ContactSearchResult, data)
