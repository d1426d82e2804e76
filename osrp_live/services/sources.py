"""Stream sources feeding the aggregator."""

import asyncio
import logging
from typing import Protocol

from ..models import MatchedStream, ScanReport, StreamFilters
from .matching import MatchPolicy
from .reducer import reduce_streams
from .twitch_api import TwitchAPIClient

logger = logging.getLogger(__name__)


class StreamSource(Protocol):
    platform: str

    async def fetch(self) -> list[MatchedStream]: ...


class TwitchSource:
    """Scan the Helix listing, keep matching streams, dedupe and sort them."""

    platform = "twitch"

    def __init__(
        self,
        client: TwitchAPIClient,
        policy: MatchPolicy,
        *,
        page_budget: int,
        filters: StreamFilters | None = None,
    ):
        self.client = client
        self.policy = policy
        self.page_budget = page_budget
        self.filters = filters

    async def discover(
        self,
        *,
        page_budget: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> tuple[list[MatchedStream], ScanReport]:
        """Run one scan and return the reduced streams with its report."""
        report = ScanReport()
        budget = self.page_budget if page_budget is None else page_budget

        matched: list[MatchedStream] = []
        async for page in self.client.scan_streams(
            budget, self.filters, cancel=cancel, report=report
        ):
            matched.extend(self.policy.apply(page.records))

        streams = reduce_streams(matched)
        report.matched = len(streams)
        logger.info(
            f"Twitch scan: {report.pages} pages, {report.scanned} streams scanned, "
            f"{report.matched} matched (stop: {report.stop_reason.value if report.stop_reason else '-'})"
        )
        return streams, report

    async def fetch(self) -> list[MatchedStream]:
        streams, _ = await self.discover()
        return streams


class TikTokSource:
    """Placeholder for the TikTok integration; contributes nothing."""

    platform = "tiktok"

    async def fetch(self) -> list[MatchedStream]:
        return []
