"""Utility helpers shared across the package."""

from .logging import get_console, setup_logging

__all__ = ["get_console", "setup_logging"]
