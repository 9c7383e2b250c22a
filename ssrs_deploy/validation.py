"""Argument checks run before any request reaches the report server."""
from __future__ import annotations

from typing import Any, Optional, TypeVar

from .models import MissingArgumentError

T = TypeVar("T")


def require(value: Optional[T], name: str) -> T:
    if value is None:
        raise MissingArgumentError(name)
    return value


def require_text(value: Optional[Any], name: str) -> str:
    """Return ``value`` as a string, rejecting ``None`` and blank text."""
    if value is None or not str(value).strip():
        raise MissingArgumentError(name)
    return str(value)
