"""Utility helpers package."""

from .logging import configure_logging, item_context

__all__ = ["configure_logging", "item_context"]
