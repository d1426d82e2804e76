"""Twitch Helix client: paginated scan of live streams.

Uses an app access token from ``TokenCache``; pages are requested strictly
one after another since each depends on the previous page's cursor.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx

from ..models import CatalogPage, ScanReport, ScanStop, StreamFilters, StreamRecord
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"

PAGE_SIZE = 100


class TwitchAPIClient:
    """Client for the public Twitch Helix streams listing.

    Owns a shared httpx client for connection reuse and the token cache
    that authorizes its requests.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
        token_cache: TokenCache | None = None,
    ):
        self.client_id = client_id

        # Shared HTTP client: reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self.tokens = token_cache or TokenCache(client_id, client_secret, self._http)

    @property
    def configured(self) -> bool:
        return self.tokens.configured

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _app_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Client-Id": self.client_id}

    @staticmethod
    def _stream_params(filters: StreamFilters | None, cursor: str | None) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = [("first", str(PAGE_SIZE))]
        if cursor:
            params.append(("after", cursor))
        if filters is not None:
            if filters.language:
                params.append(("language", filters.language))
            params.extend(("game_id", gid) for gid in filters.game_ids)
        return params

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def scan_streams(
        self,
        page_budget: int,
        filters: StreamFilters | None = None,
        *,
        cancel: asyncio.Event | None = None,
        report: ScanReport | None = None,
    ) -> AsyncIterator[CatalogPage]:
        """Yield pages of live streams until a stop condition is reached.

        Stops on an exhausted page budget, an empty page, a missing cursor,
        a failed request, an unavailable token or a set ``cancel`` event.
        Pages yielded before a failure stand.
        """
        report = report if report is not None else ScanReport()

        if page_budget <= 0:
            report.stop_reason = ScanStop.BUDGET
            return

        token = await self.tokens.acquire()
        if not token:
            logger.warning("Twitch scan skipped: no app access token")
            report.stop_reason = ScanStop.UNAVAILABLE
            return

        headers = self._app_headers(token)
        cursor: str | None = None

        for page in range(page_budget):
            if cancel is not None and cancel.is_set():
                report.stop_reason = ScanStop.CANCELLED
                return

            try:
                response = await self._http.get(
                    f"{HELIX_BASE}/streams",
                    params=self._stream_params(filters, cursor),
                    headers=headers,
                )
            except httpx.HTTPError as e:
                logger.warning(f"Helix GET /streams page {page + 1} error: {type(e).__name__}: {e}")
                report.stop_reason = ScanStop.UPSTREAM_ERROR
                return

            if response.status_code != 200:
                logger.warning(
                    f"Helix GET /streams page {page + 1} failed: "
                    f"{response.status_code} {response.text[:200]}"
                )
                if response.status_code == 401:
                    self.tokens.invalidate()
                report.stop_reason = ScanStop.UPSTREAM_ERROR
                return

            try:
                data = response.json()
            except ValueError:
                logger.warning(f"Helix GET /streams page {page + 1} returned invalid JSON")
                report.stop_reason = ScanStop.UPSTREAM_ERROR
                return

            try:
                items = data.get("data") or []
                cursor = (data.get("pagination") or {}).get("cursor") or None
                records = [StreamRecord.from_helix(item) for item in items]
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Helix GET /streams page {page + 1} malformed payload: {e}")
                report.stop_reason = ScanStop.UPSTREAM_ERROR
                return

            report.pages += 1

            if not records:
                report.stop_reason = ScanStop.EMPTY_PAGE
                return

            report.scanned += len(records)

            yield CatalogPage(records=records, cursor=cursor)

            if not cursor:
                report.stop_reason = ScanStop.NO_CURSOR
                return

        report.stop_reason = ScanStop.BUDGET
