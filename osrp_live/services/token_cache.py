"""App access token cache for the Twitch identity endpoint.

Only the client-credentials grant is used: the token authorizes public
Helix endpoints (streams, games) and is refreshed on expiry.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

OAUTH_BASE = "https://id.twitch.tv/oauth2"

# Refresh this many seconds before the upstream expiry
EXPIRY_MARGIN = 60


@dataclass
class Credential:
    """Cached bearer token with an absolute expiry on the cache clock."""

    access_token: str
    expires_at: float


class TokenCache:
    """Obtains and caches a Twitch app access token.

    ``acquire()`` returns ``None`` when no token can be obtained (missing
    credentials, non-200 or malformed reply from the identity endpoint,
    network error).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self._http = http
        self._clock = clock

        self._credential: Credential | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self._client_secret)

    def _valid_token(self) -> str | None:
        if self._credential and self._clock() < self._credential.expires_at:
            return self._credential.access_token
        return None

    def invalidate(self) -> None:
        """Drop the cached token so the next acquire() refreshes."""
        self._credential = None

    async def acquire(self) -> str | None:
        """Return a cached app access token, refreshing only when expired."""
        if not self.configured:
            return None

        token = self._valid_token()
        if token:
            return token

        async with self._lock:
            # Double-check after acquiring lock
            token = self._valid_token()
            if token:
                return token
            return await self._refresh()

    async def _refresh(self) -> str | None:
        now = self._clock()
        try:
            response = await self._http.post(
                f"{OAUTH_BASE}/token",
                data={
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"App token request failed: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Failed to get app token: {response.status_code} {response.text}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"App token response is not JSON: {response.text[:200]}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"App token response is not an object: {response.text[:200]}")
            return None

        access_token = data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            logger.warning("No access_token in app token response")
            return None

        try:
            expires_in = int(data.get("expires_in") or 0)
        except (TypeError, ValueError):
            logger.warning(f"App token response has invalid expires_in: {data.get('expires_in')!r}")
            return None

        self._credential = Credential(
            access_token=access_token,
            expires_at=now + max(expires_in - EXPIRY_MARGIN, 0),
        )
        logger.debug(f"App token refreshed, expires in {expires_in}s")
        return access_token
