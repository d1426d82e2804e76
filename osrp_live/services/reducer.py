"""Deduplicate and order matched streams."""

from collections.abc import Iterable

from ..models import MatchedStream


def reduce_streams(
    streams: Iterable[MatchedStream], *, order_by_viewers: bool = True
) -> list[MatchedStream]:
    """Drop duplicate channel URLs (first seen wins) and sort by viewers.

    Sorting only happens when every stream carries a viewer count;
    otherwise insertion order is kept. The sort is stable, so ties keep
    their scan order.
    """
    unique: dict[str, MatchedStream] = {}
    for stream in streams:
        key = (stream.url or "").lower()
        if key and key not in unique:
            unique[key] = stream

    result = list(unique.values())
    if order_by_viewers and all(s.viewers is not None for s in result):
        result.sort(key=lambda s: s.viewers or 0, reverse=True)
    return result
