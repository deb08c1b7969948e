"""
Utilities
"""

from .timeutils import (
    UTC,
    TimeHandler,
    now_utc,
    now_ms,
    from_epoch_seconds,
    to_epoch_ms,
    interval_to_seconds,
)

__all__ = [
    "UTC",
    "TimeHandler",
    "now_utc",
    "now_ms",
    "from_epoch_seconds",
    "to_epoch_ms",
    "interval_to_seconds",
]
