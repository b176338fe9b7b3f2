"""Utility modules for dockwrap."""

from .filters import merge_filters
from .humanize import human_size
from .logging import setup_logging, get_logger

__all__ = [
    "merge_filters",
    "human_size",
    "setup_logging",
    "get_logger",
]
