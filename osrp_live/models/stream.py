"""Data models for Helix stream listings and matched streams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

THUMBNAIL_WIDTH = 640
THUMBNAIL_HEIGHT = 360


@dataclass(frozen=True)
class StreamFilters:
    """Server-side filters sent with every listing request."""

    language: str | None = None
    game_ids: tuple[str, ...] = ()


@dataclass
class StreamRecord:
    """Raw stream entry as returned by ``GET /helix/streams``."""

    user_login: str
    user_name: str
    title: str
    viewer_count: int = 0
    game_id: str = ""
    language: str = ""
    thumbnail_url: str = ""
    is_live: bool = True

    @classmethod
    def from_helix(cls, data: dict[str, Any]) -> StreamRecord:
        return cls(
            user_login=str(data.get("user_login") or ""),
            user_name=str(data.get("user_name") or ""),
            title=str(data.get("title") or ""),
            viewer_count=int(data.get("viewer_count") or 0),
            game_id=str(data.get("game_id") or ""),
            language=str(data.get("language") or ""),
            thumbnail_url=str(data.get("thumbnail_url") or ""),
            is_live=(data.get("type") or "live") == "live",
        )


@dataclass
class CatalogPage:
    """One page of the listing plus its continuation cursor."""

    records: list[StreamRecord]
    cursor: str | None = None


@dataclass(frozen=True)
class MatchedStream:
    """Normalized stream that passed the match policy."""

    platform: str
    name: str
    title: str
    url: str
    thumbnail: str
    viewers: int | None = None
    language: str | None = None
    game_id: str | None = None


class ScanStop(str, Enum):
    """Why a catalog scan stopped."""

    BUDGET = "budget"
    EMPTY_PAGE = "empty_page"
    NO_CURSOR = "no_cursor"
    UPSTREAM_ERROR = "upstream_error"
    UNAVAILABLE = "unavailable"
    CANCELLED = "cancelled"


@dataclass
class ScanReport:
    """Counters collected while scanning."""

    pages: int = 0
    scanned: int = 0
    matched: int = 0
    stop_reason: ScanStop | None = None


@dataclass
class SourceOutcome:
    """Result of running one stream source."""

    platform: str
    success: bool
    streams: list[MatchedStream] = field(default_factory=list)
    error: str | None = None


def canonical_url(login: str) -> str:
    """Twitch channel URL used as the dedup key."""
    return f"https://twitch.tv/{login.strip().lower()}"


def resolve_thumbnail(template: str) -> str:
    return template.replace("{width}", str(THUMBNAIL_WIDTH), 1).replace(
        "{height}", str(THUMBNAIL_HEIGHT), 1
    )
