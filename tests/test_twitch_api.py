"""Tests for the paginated Helix streams scan."""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from osrp_live.models import CatalogPage, ScanReport, ScanStop, StreamFilters
from osrp_live.services import TwitchAPIClient
from tests.factories import (
    HELIX_HOST,
    STREAMS_PATH,
    TOKEN_URL,
    helix_page,
    stream_item,
    token_response,
)


def _full_page(prefix: str, cursor: str | None) -> httpx.Response:
    return helix_page([stream_item(f"{prefix}{i}") for i in range(100)], cursor=cursor)


async def _scan(client: TwitchAPIClient, budget: int, **kwargs) -> list[CatalogPage]:
    return [page async for page in client.scan_streams(budget, **kwargs)]


@pytest.mark.asyncio
class TestScanTermination:
    async def test_empty_third_page_stops_after_three_requests(
        self, twitch_client: TwitchAPIClient
    ) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[
                    helix_page([stream_item("alpha")], cursor="c1"),
                    helix_page([stream_item("bravo")], cursor="c2"),
                    helix_page([], cursor="c3"),
                    helix_page([stream_item("never")], cursor="c4"),
                ]
            )
            pages = await _scan(twitch_client, 10, report=report)

        assert listing.call_count == 3
        assert [r.user_login for p in pages for r in p.records] == ["alpha", "bravo"]
        assert report.stop_reason is ScanStop.EMPTY_PAGE
        assert report.scanned == 2

    async def test_page_budget_caps_requests(self, twitch_client: TwitchAPIClient) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[_full_page("a", "c1"), _full_page("b", "c2"), _full_page("c", "c3")]
            )
            pages = await _scan(twitch_client, 2, report=report)

        assert listing.call_count == 2
        assert len(pages) == 2
        assert report.stop_reason is ScanStop.BUDGET
        assert report.scanned == 200

    async def test_missing_cursor_stops_after_yielding_page(
        self, twitch_client: TwitchAPIClient
    ) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[helix_page([stream_item("alpha")], cursor=None)]
            )
            pages = await _scan(twitch_client, 5, report=report)

        assert listing.call_count == 1
        assert len(pages) == 1
        assert report.stop_reason is ScanStop.NO_CURSOR

    async def test_failed_page_keeps_earlier_pages(self, twitch_client: TwitchAPIClient) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[
                    helix_page([stream_item("alpha")], cursor="c1"),
                    httpx.Response(429, json={"message": "Too Many Requests"}),
                ]
            )
            pages = await _scan(twitch_client, 5, report=report)

        assert listing.call_count == 2
        assert [p.records[0].user_login for p in pages] == ["alpha"]
        assert report.stop_reason is ScanStop.UPSTREAM_ERROR

    async def test_transport_error_is_terminal_without_retry(
        self, twitch_client: TwitchAPIClient
    ) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=httpx.ReadTimeout("slow")
            )
            pages = await _scan(twitch_client, 5, report=report)

        assert listing.call_count == 1
        assert pages == []
        assert report.stop_reason is ScanStop.UPSTREAM_ERROR

    async def test_unauthorized_page_invalidates_token(
        self, twitch_client: TwitchAPIClient
    ) -> None:
        with respx.mock() as mock:
            token_route = mock.post(TOKEN_URL).mock(
                side_effect=[token_response("stale"), token_response("fresh")]
            )
            mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[httpx.Response(401), helix_page([stream_item("alpha")])]
            )
            assert await _scan(twitch_client, 5) == []
            pages = await _scan(twitch_client, 5)

        assert token_route.call_count == 2
        assert len(pages) == 1

    async def test_zero_budget_makes_no_requests(self, twitch_client: TwitchAPIClient) -> None:
        with respx.mock(assert_all_called=False) as mock:
            token_route = mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                return_value=helix_page([stream_item("alpha")])
            )
            assert await _scan(twitch_client, 0) == []

        assert token_route.call_count == 0
        assert listing.call_count == 0

    async def test_unavailable_token_skips_listing(self, twitch_client: TwitchAPIClient) -> None:
        report = ScanReport()
        with respx.mock(assert_all_called=False) as mock:
            mock.post(TOKEN_URL).mock(return_value=httpx.Response(400))
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH)
            assert await _scan(twitch_client, 5, report=report) == []

        assert listing.call_count == 0
        assert report.stop_reason is ScanStop.UNAVAILABLE

    async def test_cancel_event_honored_at_page_boundary(
        self, twitch_client: TwitchAPIClient
    ) -> None:
        cancel = asyncio.Event()
        report = ScanReport()
        pages: list[CatalogPage] = []
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[_full_page("a", "c1"), _full_page("b", "c2")]
            )
            async for page in twitch_client.scan_streams(5, cancel=cancel, report=report):
                pages.append(page)
                cancel.set()

        assert listing.call_count == 1
        assert len(pages) == 1
        assert report.stop_reason is ScanStop.CANCELLED


    @pytest.mark.parametrize(
        "malformed",
        [
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(200, json={"data": [stream_item("bravo")], "pagination": "c2"}),
            httpx.Response(200, json={"data": ["bravo"], "pagination": {}}),
            httpx.Response(200, json={"data": 7}),
            helix_page([stream_item("bravo", viewer_count="n/a")], cursor="c2"),
        ],
    )
    async def test_malformed_page_keeps_earlier_pages(
        self, twitch_client: TwitchAPIClient, malformed: httpx.Response
    ) -> None:
        report = ScanReport()
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[
                    helix_page([stream_item("alpha")], cursor="c1"),
                    malformed,
                    helix_page([stream_item("never")]),
                ]
            )
            pages = await _scan(twitch_client, 5, report=report)

        assert listing.call_count == 2
        assert [r.user_login for p in pages for r in p.records] == ["alpha"]
        assert report.stop_reason is ScanStop.UPSTREAM_ERROR
        assert report.pages == 1


@pytest.mark.asyncio
class TestScanRequests:
    async def test_headers_and_query_parameters(self, twitch_client: TwitchAPIClient) -> None:
        filters = StreamFilters(language="fr", game_ids=("32982", "491318"))
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response("tok"))
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                side_effect=[
                    helix_page([stream_item("alpha")], cursor="next-cursor"),
                    helix_page([stream_item("bravo")]),
                ]
            )
            await _scan(twitch_client, 5, filters=filters)

        first, second = (call.request for call in listing.calls)
        assert first.headers["Authorization"] == "Bearer tok"
        assert first.headers["Client-Id"] == "client-id"
        assert first.url.params["first"] == "100"
        assert first.url.params["language"] == "fr"
        assert first.url.params.get_list("game_id") == ["32982", "491318"]
        assert "after" not in first.url.params
        assert second.url.params["after"] == "next-cursor"

    async def test_no_filters_sends_only_page_size(self, twitch_client: TwitchAPIClient) -> None:
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            listing = mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(
                return_value=helix_page([stream_item("alpha")])
            )
            await _scan(twitch_client, 1)

        params = listing.calls.last.request.url.params
        assert dict(params) == {"first": "100"}

    async def test_records_parsed_from_helix(self, twitch_client: TwitchAPIClient) -> None:
        item = stream_item("Alpha", title="O.S.R.P night", viewer_count=42, type="rerun")
        with respx.mock() as mock:
            mock.post(TOKEN_URL).mock(return_value=token_response())
            mock.get(host=HELIX_HOST, path=STREAMS_PATH).mock(return_value=helix_page([item]))
            (page,) = await _scan(twitch_client, 1)

        record = page.records[0]
        assert record.user_login == "Alpha"
        assert record.title == "O.S.R.P night"
        assert record.viewer_count == 42
        assert record.game_id == "32982"
        assert record.is_live is False
