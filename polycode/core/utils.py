"""
Shared utility functions for polycode.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    """Current time as milliseconds since the epoch."""
    return int(time.time() * 1000)


def time_ago(timestamp: int | None, now: int | None = None) -> str:
    """
    Human readable age of an epoch-millisecond timestamp.

    Returns "just now" under ten seconds, then the largest whole unit
    ("42s", "5m", "3h", "2d"). Missing timestamps render as "".
    """
    if not timestamp:
        return ""

    now = epoch_ms() if now is None else now
    seconds = (now - timestamp) // 1000
    if seconds < 10:
        return "just now"
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"
