"""Incremental contact extraction over HubSpot's recent-contacts listing.

Each iteration of the loop:

1. Fetches one page (newest first) at the current cursor.
2. Batch-fetches the full records and joins each summary's addedAt onto its
   detail, keeping the listing order.
3. Looks for the stop point: the first contact added at or before
   ``time_stop`` and the first contact whose vid equals ``vid_stop``. A vid
   match wins over a time match. The batch is cut just before the stop point.
4. Formats the retained contacts and appends them to the sink in one call.
5. Continues only when HubSpot reports more data and no stop point was hit.

The loop is strictly sequential: the next cursor comes from the previous page.
Any failure aborts the whole run; pages already appended stay appended.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.hubsheets.attribution.resolver import AttributionResolver
from src.hubsheets.core.exceptions import JoinError
from src.hubsheets.hubspot.schemas import (
    ContactDetail,
    ContactSummary,
    PageCursor,
    StopCondition,
)
from src.hubsheets.hubspot.source import CRMSource
from src.hubsheets.sheets.sink import RowSink

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100


def join_added_at(
    summaries: Sequence[ContactSummary],
    details: dict[int, ContactDetail],
) -> list[ContactDetail]:
    """Attach each summary's addedAt to its detail record, in summary order.

    Summaries whose detail is missing from the batch answer are dropped.

    Raises:
        JoinError: If the batch answer contains a contact that is not in the page.
    """
    summary_vids = {summary.vid for summary in summaries}
    for vid in details:
        if vid not in summary_vids:
            raise JoinError("summary", vid, "detail returned for a contact not in the page")

    enriched: list[ContactDetail] = []
    for summary in summaries:
        detail = details.get(summary.vid)
        if detail is None:
            logger.warning("pagination.detail_missing", vid=summary.vid)
            continue
        enriched.append(detail.model_copy(update={"added_at": summary.added_at}))
    return enriched


def find_stop_index(batch: Sequence[ContactDetail], stop: StopCondition) -> int | None:
    """Return the index to cut the batch at, or None when no stop point is in it."""
    time_index: int | None = None
    if stop.time_stop is not None:
        time_index = next(
            (
                i
                for i, contact in enumerate(batch)
                if contact.added_at is not None and contact.added_at <= stop.time_stop
            ),
            None,
        )

    vid_index: int | None = None
    if stop.vid_stop is not None:
        vid_index = next(
            (i for i, contact in enumerate(batch) if contact.vid == stop.vid_stop),
            None,
        )

    # vid match takes precedence over time match
    return vid_index if vid_index is not None else time_index


class PaginationEngine:
    """Drives the recent-contacts cursor loop.

    Args:
        source: CRM read interface.
        resolver: Formats enriched contacts into report rows.
        sink: Receives one append per page.
        page_size: Contacts per listing page.
    """

    def __init__(
        self,
        source: CRMSource,
        resolver: AttributionResolver,
        sink: RowSink,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self._source = source
        self._resolver = resolver
        self._sink = sink
        self._page_size = page_size

    async def _enrich(self, summaries: Sequence[ContactSummary]) -> list[ContactDetail]:
        if not summaries:
            return []
        details = await self._source.fetch_contact_details(
            [summary.vid for summary in summaries]
        )
        return join_added_at(summaries, details)

    async def run(
        self,
        cursor: PageCursor | None = None,
        stop: StopCondition | None = None,
    ) -> list[ContactDetail]:
        """Extract contacts until the listing ends or a stop point is reached.

        Args:
            cursor: Where to start. Defaults to the most recent contact.
            stop: Where to stop. Defaults to no stop point.

        Returns:
            Every retained enriched contact, in listing order across pages.

        Raises:
            TransportError: If a CRM or sink call fails.
            JoinError: If a detail record cannot be matched to its summary.
        """
        cursor = cursor or PageCursor()
        stop = stop or StopCondition()
        accumulated: list[ContactDetail] = []
        page_number = 0

        while True:
            page_number += 1
            page = await self._source.fetch_recent_contacts(
                cursor.vid_offset, cursor.time_offset, self._page_size
            )
            batch = await self._enrich(page.contacts)

            stop_index = find_stop_index(batch, stop)
            retained = batch if stop_index is None else batch[:stop_index]

            if retained:
                await self._sink.append(self._resolver.format_many(retained))
            accumulated.extend(retained)

            logger.info(
                "pagination.page_processed",
                page=page_number,
                vid_offset=cursor.vid_offset,
                time_offset=cursor.time_offset,
                fetched=len(page.contacts),
                retained=len(retained),
                stopped=stop_index is not None,
                has_more=page.has_more,
            )

            if not page.has_more or stop_index is not None:
                break
            cursor = PageCursor(vid_offset=page.vid_offset, time_offset=page.time_offset)

        logger.info(
            "pagination.completed",
            pages=page_number,
            contact_count=len(accumulated),
        )
        return accumulated
