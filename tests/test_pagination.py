"""Unit tests for the PaginationEngine extraction loop.

Uses an in-memory CRMSource double serving scripted pages and an
AsyncMock(spec=RowSink) -- no HubSpot or Google calls.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.hubsheets.attribution.resolver import AttributionResolver
from src.hubsheets.core.exceptions import JoinError, TransportError
from src.hubsheets.hubspot.schemas import (
    ContactDetail,
    ContactSearchResult,
    ContactSummary,
    PageCursor,
    PipelineDetail,
    RecentContactsPage,
    StopCondition,
)
from src.hubsheets.hubspot.source import CRMSource
from src.hubsheets.pipeline.engine import (
    PAGE_SIZE,
    PaginationEngine,
    find_stop_index,
    join_added_at,
)
from src.hubsheets.sheets.sink import RowSink


# ── In-Memory Test Double ────────────────────────────────────────────────────


class InMemoryCRMSource(CRMSource):
    """Serves scripted recent-contacts pages keyed by cursor."""

    def __init__(self, pages: dict[tuple[int | None, int | None], RecentContactsPage]) -> None:
        self._pages = pages
        self._details: dict[int, ContactDetail] = {}
        self.page_calls: list[tuple[int | None, int | None, int]] = []
        self.detail_calls: list[list[int]] = []
        for page in pages.values():
            for summary in page.contacts:
                self._details[summary.vid] = ContactDetail(
                    vid=summary.vid,
                    properties={},
                )

    async def fetch_recent_contacts(self, vid_offset, time_offset, page_size):
        self.page_calls.append((vid_offset, time_offset, page_size))
        return self._pages[(vid_offset, time_offset)]

    async def fetch_contact_details(self, ids):
        self.detail_calls.append(list(ids))
        # HubSpot answers keyed by vid, not in request order
        return {vid: self._details[vid] for vid in sorted(ids) if vid in self._details}

    async def fetch_deal_associations(self, contact_id):
        return []

    async def fetch_deal(self, deal_id):
        raise NotImplementedError

    async def fetch_deal_pipelines(self) -> list[PipelineDetail]:
        return []

    async def search_contacts(self, query, count=20, offset=0):
        return ContactSearchResult()


# ── Helpers ────────────────────────────────────────────────────────────────


def _summaries(*pairs: tuple[int, int]) -> list[ContactSummary]:
    return [ContactSummary(vid=vid, added_at=added_at) for vid, added_at in pairs]


def _page(
    summaries: list[ContactSummary],
    has_more: bool = False,
    vid_offset: int | None = None,
    time_offset: int | None = None,
) -> RecentContactsPage:
    return RecentContactsPage(
        contacts=summaries,
        has_more=has_more,
        vid_offset=vid_offset,
        time_offset=time_offset,
    )


def _enriched(*pairs: tuple[int, int]) -> list[ContactDetail]:
    return [ContactDetail(vid=vid, added_at=added_at) for vid, added_at in pairs]


# Six contacts, newest first
SIX = ((106, 6000), (105, 5000), (104, 4000), (103, 3000), (102, 2000), (101, 1000))


@pytest.fixture
def sink():
    return AsyncMock(spec=RowSink)


@pytest.fixture
def resolver():
    return AttributionResolver(portal_id="6331207")


# ── find_stop_index ──────────────────────────────────────────────────────────


class TestFindStopIndex:
    def test_no_stop_condition(self):
        assert find_stop_index(_enriched(*SIX), StopCondition()) is None

    def test_time_stop_is_inclusive(self):
        stop = StopCondition(time_stop=4000)
        assert find_stop_index(_enriched(*SIX), stop) == 2

    def test_time_stop_between_records(self):
        stop = StopCondition(time_stop=4500)
        assert find_stop_index(_enriched(*SIX), stop) == 2

    def test_vid_stop(self):
        stop = StopCondition(vid_stop=103)
        assert find_stop_index(_enriched(*SIX), stop) == 3

    def test_vid_match_takes_precedence_over_time_match(self):
        # time_stop matches at index 1, vid_stop at index 3
        stop = StopCondition(vid_stop=103, time_stop=5500)
        assert find_stop_index(_enriched(*SIX), stop) == 3

    def test_time_match_used_when_vid_absent_from_page(self):
        stop = StopCondition(vid_stop=999, time_stop=5500)
        assert find_stop_index(_enriched(*SIX), stop) == 1

    def test_no_match(self):
        stop = StopCondition(vid_stop=999, time_stop=10)
        assert find_stop_index(_enriched(*SIX), stop) is None


# ── join_added_at ────────────────────────────────────────────────────────────


class TestJoinAddedAt:
    def test_follows_summary_order_and_joins_added_at(self):
        summaries = _summaries((3, 300), (1, 100), (2, 200))
        details = {vid: ContactDetail(vid=vid) for vid in (1, 2, 3)}

        enriched = join_added_at(summaries, details)

        assert [(c.vid, c.added_at) for c in enriched] == [(3, 300), (1, 100), (2, 200)]

    def test_does_not_mutate_details(self):
        details = {1: ContactDetail(vid=1)}
        join_added_at(_summaries((1, 100)), details)
        assert details[1].added_at is None

    def test_missing_detail_is_dropped(self):
        enriched = join_added_at(
            _summaries((1, 100), (2, 200)),
            {2: ContactDetail(vid=2)},
        )
        assert [c.vid for c in enriched] == [2]

    def test_detail_without_summary_raises(self):
        with pytest.raises(JoinError) as exc_info:
            join_added_at(_summaries((1, 100)), {1: ContactDetail(vid=1), 9: ContactDetail(vid=9)})

        assert exc_info.value.reference == 9


# ── PaginationEngine ─────────────────────────────────────────────────────────


class TestPaginationEngine:
    async def test_first_page_uses_null_cursor_and_page_size(self, sink, resolver):
        source = InMemoryCRMSource({(None, None): _page(_summaries(*SIX))})

        await PaginationEngine(source, resolver, sink).run()

        assert source.page_calls == [(None, None, PAGE_SIZE)]
        assert PAGE_SIZE == 100

    async def test_single_page_without_more_data(self, sink, resolver):
        source = InMemoryCRMSource({(None, None): _page(_summaries(*SIX))})

        contacts = await PaginationEngine(source, resolver, sink).run()

        assert [c.vid for c in contacts] == [106, 105, 104, 103, 102, 101]
        assert [c.added_at for c in contacts] == [6000, 5000, 4000, 3000, 2000, 1000]
        sink.append.assert_awaited_once()
        rows = sink.append.await_args.args[0]
        assert [r.id for r in rows] == [106, 105, 104, 103, 102, 101]

    async def test_batches_detail_fetch_per_page(self, sink, resolver):
        source = InMemoryCRMSource({(None, None): _page(_summaries(*SIX))})

        await PaginationEngine(source, resolver, sink).run()

        assert source.detail_calls == [[106, 105, 104, 103, 102, 101]]

    async def test_two_pages_accumulate(self, sink, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(
                _summaries((106, 6000), (105, 5000), (104, 4000)),
                has_more=True,
                vid_offset=104,
                time_offset=4000,
            ),
            (104, 4000): _page(_summaries((103, 3000), (102, 2000)), has_more=False),
        })

        contacts = await PaginationEngine(source, resolver, sink).run()

        assert len(contacts) == 5
        assert [c.vid for c in contacts] == [106, 105, 104, 103, 102]
        assert source.page_calls == [(None, None, 100), (104, 4000, 100)]
        assert sink.append.await_count == 2

    async def test_starts_from_given_cursor(self, sink, resolver):
        source = InMemoryCRMSource({(50, 777): _page(_summaries((49, 700)))})

        contacts = await PaginationEngine(source, resolver, sink).run(
            cursor=PageCursor(vid_offset=50, time_offset=777)
        )

        assert source.page_calls == [(50, 777, 100)]
        assert [c.vid for c in contacts] == [49]

    async def test_stop_precedence_vid_over_time(self, sink, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(_summaries(*SIX), has_more=True, vid_offset=101, time_offset=1000),
        })

        contacts = await PaginationEngine(source, resolver, sink).run(
            stop=StopCondition(vid_stop=103, time_stop=5500)
        )

        assert [c.vid for c in contacts] == [106, 105, 104]
        assert len(source.page_calls) == 1
        rows = sink.append.await_args.args[0]
        assert len(rows) == 3

    async def test_time_stop_halts_despite_more_data(self, sink, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(_summaries(*SIX), has_more=True, vid_offset=101, time_offset=1000),
        })

        contacts = await PaginationEngine(source, resolver, sink).run(
            stop=StopCondition(time_stop=4000)
        )

        assert [c.vid for c in contacts] == [106, 105]
        assert len(source.page_calls) == 1

    async def test_stop_on_second_page(self, sink, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(
                _summaries((106, 6000), (105, 5000)),
                has_more=True,
                vid_offset=105,
                time_offset=5000,
            ),
            (105, 5000): _page(
                _summaries((104, 4000), (103, 3000), (102, 2000)),
                has_more=True,
                vid_offset=102,
                time_offset=2000,
            ),
        })

        contacts = await PaginationEngine(source, resolver, sink).run(
            stop=StopCondition(vid_stop=103)
        )

        assert [c.vid for c in contacts] == [106, 105, 104]
        assert len(source.page_calls) == 2

    async def test_stop_at_first_record_sinks_nothing(self, sink, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(_summaries(*SIX), has_more=True, vid_offset=101, time_offset=1000),
        })

        contacts = await PaginationEngine(source, resolver, sink).run(
            stop=StopCondition(vid_stop=106)
        )

        assert contacts == []
        sink.append.assert_not_awaited()

    async def test_empty_page_skips_detail_fetch(self, sink, resolver):
        source = InMemoryCRMSource({(None, None): _page([], has_more=False)})

        contacts = await PaginationEngine(source, resolver, sink).run()

        assert contacts == []
        assert source.detail_calls == []
        sink.append.assert_not_awaited()

    async def test_transport_failure_aborts_run(self, sink, resolver):
        source = AsyncMock(spec=CRMSource)
        source.fetch_recent_contacts.side_effect = [
            _page(_summaries((2, 200)), has_more=True, vid_offset=2, time_offset=200),
            TransportError("fetch_recent_contacts", "HTTP 502", 502),
        ]
        source.fetch_contact_details.return_value = {2: ContactDetail(vid=2)}

        with pytest.raises(TransportError):
            await PaginationEngine(source, resolver, sink).run()

        sink.append.assert_awaited_once()

    async def test_sink_failure_aborts_run(self, resolver):
        source = InMemoryCRMSource({
            (None, None): _page(_summaries((2, 200)), has_more=True, vid_offset=2, time_offset=200),
        })
        sink = AsyncMock(spec=RowSink)
        sink.append.side_effect = TransportError("append_rows", "HTTP 403", 403)

        with pytest.raises(TransportError):
            await PaginationEngine(source, resolver, sink).run()

        assert len(source.page_calls) == 1

    async def test_formatted_rows_carry_joined_added_at(self, sink, resolver):
        source = InMemoryCRMSource({(None, None): _page(_summaries((7, 1_580_515_200_000)))})

        await PaginationEngine(source, resolver, sink).run()

        (row,) = sink.append.await_args.args[0]
        assert row.added_at == resolver.format(
            ContactDetail(vid=7, added_at=1_580_515_200_000)
        ).added_at

