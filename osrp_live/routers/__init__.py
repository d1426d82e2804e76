"""API Routers package

This package contains all API route handlers.
"""

from . import streams_router

__all__ = [
    "streams_router",
]
