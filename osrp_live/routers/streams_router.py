"""Live stream listing API routes"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..core.dependencies import get_sources, get_twitch_source
from ..models import MatchedStream, ScanReport
from ..services import StreamSource, TwitchSource, aggregate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["streams"])

DEBUG_SAMPLE_SIZE = 10


class StreamOut(BaseModel):
    platform: str
    name: str
    title: str
    thumbnail: str
    url: str
    viewers: int | None = None
    language: str | None = None
    game_id: str | None = None


class DebugMatchResponse(BaseModel):
    count: int
    scanned: int
    pages: int
    stop_reason: str | None
    sample: list[StreamOut]


class RawStreamOut(BaseModel):
    user_login: str
    user_name: str
    title: str
    viewer_count: int
    game_id: str
    language: str
    matches: bool


class DebugRawResponse(BaseModel):
    scanned: int
    matched: int
    stop_reason: str | None
    sample: list[RawStreamOut]


def _to_out(stream: MatchedStream) -> StreamOut:
    return StreamOut(**asdict(stream))


@router.get("/streams", response_model=list[StreamOut])
async def list_streams(sources: list[StreamSource] = Depends(get_sources)) -> list[StreamOut]:
    """All matching live streams, most viewers first. Never fails."""
    streams = await aggregate(sources)
    return [_to_out(s) for s in streams]


@router.get("/debug-osrp", response_model=DebugMatchResponse)
async def debug_matches(source: TwitchSource = Depends(get_twitch_source)) -> DebugMatchResponse:
    """Match count and the first matched streams of a full Twitch scan"""
    streams, report = await source.discover()
    return DebugMatchResponse(
        count=len(streams),
        scanned=report.scanned,
        pages=report.pages,
        stop_reason=report.stop_reason.value if report.stop_reason else None,
        sample=[_to_out(s) for s in streams[:DEBUG_SAMPLE_SIZE]],
    )


@router.get("/debug-raw", response_model=DebugRawResponse)
async def debug_raw(
    limit: int = Query(default=DEBUG_SAMPLE_SIZE, ge=1, le=100),
    source: TwitchSource = Depends(get_twitch_source),
) -> DebugRawResponse:
    """First raw records of a single page, each flagged with its match result"""
    sample: list[RawStreamOut] = []
    matched = 0
    scanned = 0
    report = ScanReport()

    async for page in source.client.scan_streams(1, source.filters, report=report):
        for record in page.records:
            scanned += 1
            is_match = source.policy.matches(record)
            if is_match:
                matched += 1
            if len(sample) < limit:
                sample.append(
                    RawStreamOut(
                        user_login=record.user_login,
                        user_name=record.user_name,
                        title=record.title,
                        viewer_count=record.viewer_count,
                        game_id=record.game_id,
                        language=record.language,
                        matches=is_match,
                    )
                )

    logger.debug(f"debug-raw: {scanned} scanned, {matched} matched")
    return DebugRawResponse(
        scanned=scanned,
        matched=matched,
        stop_reason=report.stop_reason.value if report.stop_reason else None,
        sample=sample,
    )
