"""Run every stream source concurrently and merge their results.

A failing source contributes nothing; ``aggregate`` itself never raises
(except for cancellation of the calling task).
"""

import asyncio
import logging
from collections.abc import Sequence

from ..models import MatchedStream, SourceOutcome
from .sources import StreamSource

logger = logging.getLogger(__name__)


async def run_source(source: StreamSource) -> SourceOutcome:
    """Run one source and wrap its result or failure."""
    try:
        streams = await source.fetch()
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.exception(f"Stream source '{source.platform}' failed: {e}")
        return SourceOutcome(
            platform=source.platform, success=False, error=f"{type(e).__name__}: {e}"
        )
    return SourceOutcome(platform=source.platform, success=True, streams=list(streams))


async def collect(sources: Sequence[StreamSource]) -> list[SourceOutcome]:
    """Outcomes of all sources, in declaration order."""
    if not sources:
        return []
    return list(await asyncio.gather(*(run_source(s) for s in sources)))


def merge(outcomes: Sequence[SourceOutcome]) -> list[MatchedStream]:
    """Concatenate successful contributions; failed ones are discarded."""
    merged: list[MatchedStream] = []
    for outcome in outcomes:
        if outcome.success:
            merged.extend(outcome.streams)
        else:
            logger.warning(f"Dropping '{outcome.platform}' contribution: {outcome.error}")
    return merged


async def aggregate(sources: Sequence[StreamSource]) -> list[MatchedStream]:
    return merge(await collect(sources))
