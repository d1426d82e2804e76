"""Shared pytest fixtures.

Fixture summary
---------------
clean_settings : fresh ``get_settings()`` cache and no shared Twitch client per test.
http           : plain ``httpx.AsyncClient``; requests are intercepted by respx.
clock          : ``FakeClock`` injected into token caches.
twitch_client  : ``TwitchAPIClient`` with test credentials sharing ``http`` and ``clock``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from osrp_live.core import dependencies
from osrp_live.core.config import get_settings
from osrp_live.services import TokenCache, TwitchAPIClient
from tests.factories import FakeClock

_ENV_VARS = (
    "TWITCH_CLIENT_ID",
    "TWITCH_SECRET",
    "TWITCH_MAX_PAGES",
    "TWITCH_LANGUAGE",
    "TWITCH_GAME_IDS",
    "TWITCH_WHITELIST",
    "MATCH_PRECEDENCE",
    "TITLE_MATCH_ENABLED",
    "REQUEST_TIMEOUT",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(dependencies, "_twitch_api", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def http() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=5.0) as client:
        yield client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def twitch_client(http: httpx.AsyncClient, clock: FakeClock) -> TwitchAPIClient:
    tokens = TokenCache("client-id", "client-secret", http, clock=clock)
    return TwitchAPIClient("client-id", "client-secret", http=http, token_cache=tokens)
