"""Helpers for safe debug logging.

Sensor buses deliver arbitrary bytes. This module keeps raw input short
and printable before it reaches a log line.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def truncate_for_log(value: Any, *, max_string: int = 120) -> Any:
    """Return a printable, length-limited copy of *value*."""
    if value is None:
        return None

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, str):
        text = value.rstrip("\r\n")
        if not text.isprintable():
            text = "".join(ch if ch.isprintable() else "?" for ch in text)
        if len(text) > max_string:
            return f"{text[:max_string]}…<truncated>"
        return text

    if isinstance(value, Mapping):
        return {str(k): truncate_for_log(v, max_string=max_string) for k, v in value.items()}

    return value
