"""Dependency injection utilities for FastAPI"""

import logging

from ..models import StreamFilters
from ..services import (
    MatchPolicy,
    MatchPrecedence,
    StreamSource,
    TikTokSource,
    TitleRule,
    TwitchAPIClient,
    TwitchSource,
)
from .config import Settings, get_settings

logger = logging.getLogger(__name__)


_twitch_api: TwitchAPIClient | None = None


def get_twitch_api() -> TwitchAPIClient:
    """Get shared TwitchAPIClient singleton (connection reuse + token cache)."""
    global _twitch_api
    if _twitch_api is None:
        settings = get_settings()
        _twitch_api = TwitchAPIClient(
            client_id=settings.twitch_client_id,
            client_secret=settings.twitch_secret,
            timeout=settings.request_timeout,
        )
    return _twitch_api


async def close_twitch_api() -> None:
    """Close the shared TwitchAPIClient. Call on app shutdown."""
    global _twitch_api
    if _twitch_api is not None:
        await _twitch_api.close()
        _twitch_api = None


def build_match_policy(settings: Settings) -> MatchPolicy:
    return MatchPolicy(
        title=TitleRule(enabled=settings.title_match_enabled),
        categories=settings.game_ids,
        logins=settings.whitelist,
        precedence=MatchPrecedence(settings.match_precedence),
    )


def get_twitch_source() -> TwitchSource:
    """Get TwitchSource wired from settings (dependency injection)"""
    settings = get_settings()
    filters = StreamFilters(
        language=settings.twitch_language or None,
        game_ids=tuple(settings.game_ids),
    )
    return TwitchSource(
        get_twitch_api(),
        build_match_policy(settings),
        page_budget=settings.twitch_max_pages,
        filters=filters,
    )


def get_sources() -> list[StreamSource]:
    """All stream sources in merge order"""
    return [get_twitch_source(), TikTokSource()]
