"""FastAPI application factory"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .core.config import get_settings
from .core.dependencies import close_twitch_api
from .core.logging import setup_logging
from .routers import streams_router

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).parent / "public"
INDEX_HTML = PUBLIC_DIR / "index.html"

# Paths owned by the API; never answered with the SPA page
API_PATHS = ("streams", "health", "debug-osrp", "debug-raw", "docs", "openapi.json")

# Track server start time
_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time
    _start_time = time.time()

    settings = get_settings()

    # Startup
    logger.info("Starting OSRP Live server")
    if not settings.has_twitch_credentials:
        logger.warning("TWITCH_CLIENT_ID / TWITCH_SECRET not set, /streams will be empty")
    logger.info(
        f"Scan: max_pages={settings.twitch_max_pages}, "
        f"language={settings.twitch_language or '-'}, game_ids={settings.game_ids or '-'}, "
        f"whitelist={len(settings.whitelist)}, precedence={settings.match_precedence}"
    )

    yield

    # Shutdown
    logger.info("Shutting down OSRP Live server")
    try:
        await close_twitch_api()
    except Exception as e:
        logger.exception(f"Error during shutdown: {e}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    app = FastAPI(
        title="OSRP Live",
        description="Live OSRP streams discovered on Twitch",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(streams_router.router)

    @app.get("/health")
    async def health():
        """Configuration presence check (no upstream call)"""
        return {
            "ok": True,
            "has_client_id": bool(settings.twitch_client_id),
            "has_secret": bool(settings.twitch_secret),
            "max_pages": settings.twitch_max_pages,
            "language": settings.twitch_language or None,
            "game_ids": settings.game_ids,
            "whitelist_count": len(settings.whitelist),
            "match_precedence": settings.match_precedence,
            "uptime_seconds": int(time.time() - _start_time) if _start_time else 0,
        }

    # Static web page
    if PUBLIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(INDEX_HTML)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str):
        """Serve public files directly, anything else gets the SPA page"""
        if full_path.split("/", 1)[0] in API_PATHS:
            raise HTTPException(status_code=404, detail="Not found")
        candidate = (PUBLIC_DIR / full_path).resolve()
        if candidate.is_file() and PUBLIC_DIR.resolve() in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(INDEX_HTML)

    logger.info("FastAPI application configured")

    return app
