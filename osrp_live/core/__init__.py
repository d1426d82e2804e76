"""Core modules: settings, logging and dependency wiring."""

from .config import MAX_PAGE_BUDGET, Settings, get_settings
from .logging import setup_logging

__all__ = [
    "MAX_PAGE_BUDGET",
    "Settings",
    "get_settings",
    "setup_logging",
]
