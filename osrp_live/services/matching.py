"""Match policy: which raw streams belong to the community listing.

Three independent rules are combined by an explicit precedence:

- ``TitleRule``   : title looks like an OSRP stream (acronym, phrase, prefix)
- ``CategoryRule``: game/category id is in the allow-list
- ``LoginRule``   : broadcaster login is in the allow-list

``CATEGORY_GATE``: category AND (title OR login), or title OR login
without a category list.
``WHITELIST_OVERRIDE``: login OR (category AND title), or login OR title
without a category list.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..models import MatchedStream, StreamRecord, canonical_url, resolve_thumbnail

PLATFORM = "twitch"

# Punctuation/whitespace tolerated between acronym letters: "O.S.R.P", "os rp", "o-s-r-p"
_ACRONYM_SEPARATOR = r"[\s._\-]*"

DEFAULT_ACRONYMS = ("osrp",)
DEFAULT_PHRASES = ("old school rp",)
DEFAULT_PREFIXES = ("osrp",)

SPELLED_WORD_MAX = 2


class MatchPrecedence(str, Enum):
    CATEGORY_GATE = "category_gate"
    WHITELIST_OVERRIDE = "whitelist_override"


def acronym_pattern(letters: str) -> str:
    return r"\b" + _ACRONYM_SEPARATOR.join(re.escape(c) for c in letters if not c.isspace())


def _phrase_word(word: str) -> str:
    # Short words may be spelled out: "rp" also matches "r p"
    if len(word) <= SPELLED_WORD_MAX:
        return r"\s*".join(re.escape(c) for c in word)
    return re.escape(word)


def phrase_pattern(phrase: str) -> str:
    # Words may be glued together or separated by any amount of whitespace
    return r"\s*".join(_phrase_word(word) for word in phrase.split())


def prefix_pattern(prefix: str) -> str:
    return re.escape(prefix) + r"\w*"


@dataclass
class TitleRule:
    acronyms: tuple[str, ...] = DEFAULT_ACRONYMS
    phrases: tuple[str, ...] = DEFAULT_PHRASES
    prefixes: tuple[str, ...] = DEFAULT_PREFIXES
    enabled: bool = True
    _patterns: list[re.Pattern[str]] = field(init=False, repr=False, default_factory=list)

    def __post_init__(self) -> None:
        sources = (
            [acronym_pattern(a) for a in self.acronyms if a.strip()]
            + [phrase_pattern(p) for p in self.phrases if p.strip()]
            + [prefix_pattern(p) for p in self.prefixes if p.strip()]
        )
        self._patterns = [re.compile(s, re.IGNORECASE) for s in sources]

    def matches(self, title: str) -> bool:
        if not self.enabled or not title:
            return False
        return any(p.search(title) for p in self._patterns)


@dataclass
class CategoryRule:
    game_ids: frozenset[str] = frozenset()

    @property
    def active(self) -> bool:
        return bool(self.game_ids)

    def matches(self, game_id: str) -> bool:
        return game_id in self.game_ids


@dataclass
class LoginRule:
    logins: frozenset[str] = frozenset()

    def matches(self, login: str) -> bool:
        return bool(login) and login.lower() in self.logins


class MatchPolicy:
    """Per-record predicate plus normalization of matched records."""

    def __init__(
        self,
        title: TitleRule | None = None,
        categories: Iterable[str] = (),
        logins: Iterable[str] = (),
        precedence: MatchPrecedence = MatchPrecedence.CATEGORY_GATE,
    ):
        self.title = title or TitleRule()
        self.category = CategoryRule(frozenset(str(g) for g in categories))
        self.login = LoginRule(frozenset(login.lower() for login in logins))
        self.precedence = MatchPrecedence(precedence)

    def matches(self, record: StreamRecord) -> bool:
        title_ok = self.title.matches(record.title)
        login_ok = self.login.matches(record.user_login)

        if self.precedence is MatchPrecedence.WHITELIST_OVERRIDE:
            if login_ok:
                return True
            if self.category.active:
                return title_ok and self.category.matches(record.game_id)
            return title_ok

        if self.category.active and not self.category.matches(record.game_id):
            return False
        return title_ok or login_ok

    def normalize(self, record: StreamRecord) -> MatchedStream:
        return MatchedStream(
            platform=PLATFORM,
            name=record.user_name or record.user_login,
            title=record.title,
            url=canonical_url(record.user_login),
            thumbnail=resolve_thumbnail(record.thumbnail_url),
            viewers=record.viewer_count,
            language=record.language or None,
            game_id=record.game_id or None,
        )

    def apply(self, records: Iterable[StreamRecord]) -> list[MatchedStream]:
        """Normalize every live record that matches."""
        return [
            self.normalize(r)
            for r in records
            if r.user_login and r.is_live and self.matches(r)
        ]
