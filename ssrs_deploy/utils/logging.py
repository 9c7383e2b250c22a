"""Logging helpers that emit one JSON record per log line."""
from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional

from ..config import get_settings

CONTEXT_FIELDS = ("endpoint", "item", "item_type", "folder", "pattern", "credential_scheme")


class JsonFormatter(logging.Formatter):
    """Formatter that renders structured JSON log records."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        for attr in CONTEXT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging handler once for the process.

    ``level`` defaults to the ``SSRS_LOG_LEVEL`` setting.
    """
    if level is None:
        level = get_settings().log_level
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(handlers=[handler], level=level, force=True)


def item_context(
    item: str, folder: str, item_type: Optional[str] = None, endpoint: Optional[str] = None
) -> dict[str, Any]:
    """Return the ``extra`` dict used to enrich records about one catalog item."""
    context: dict[str, Any] = {"item": item, "folder": folder}
    if item_type:
        context["item_type"] = item_type
    if endpoint:
        context["endpoint"] = endpoint
    return context
