"""Services layer - stream discovery pipeline

Token cache -> catalog scan -> match policy -> reducer -> aggregator.
Services are initialized with their dependencies and accessed through dependency injection.
"""

from .aggregator import aggregate
from .matching import MatchPolicy, MatchPrecedence, TitleRule
from .reducer import reduce_streams
from .sources import StreamSource, TikTokSource, TwitchSource
from .token_cache import TokenCache
from .twitch_api import TwitchAPIClient

__all__ = [
    "MatchPolicy",
    "MatchPrecedence",
    "StreamSource",
    "TikTokSource",
    "TitleRule",
    "TokenCache",
    "TwitchAPIClient",
    "TwitchSource",
    "aggregate",
    "reduce_streams",
]
