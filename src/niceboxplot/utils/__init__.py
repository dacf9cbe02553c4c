"""Utility functions for niceboxplot."""

from .logging import configure_logging, get_logger, setup_logging

__all__ = [
    "configure_logging",
    "get_logger",
    "setup_logging",
]
