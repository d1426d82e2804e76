"""Data models for the stream discovery pipeline."""

from .stream import (
    CatalogPage,
    MatchedStream,
    ScanReport,
    ScanStop,
    SourceOutcome,
    StreamFilters,
    StreamRecord,
    canonical_url,
    resolve_thumbnail,
)

__all__ = [
    "CatalogPage",
    "MatchedStream",
    "ScanReport",
    "ScanStop",
    "SourceOutcome",
    "StreamFilters",
    "StreamRecord",
    "canonical_url",
    "resolve_thumbnail",
]
