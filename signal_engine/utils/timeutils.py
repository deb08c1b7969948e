"""
Time Utilities
Exchange timestamps arrive as epoch seconds (candles) or milliseconds
(order books); everything is handled in UTC
"""

from datetime import datetime
from typing import Optional

import pytz

# ========================
# Timezone Constants
# ========================
UTC = pytz.UTC

_INTERVAL_UNITS = {
    "m": 60,
    "h": 3600,
    "d": 86400,
}


class TimeHandler:
    """Conversions between datetimes and exchange epoch timestamps"""

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normalise a datetime to aware UTC

        Naive datetimes are assumed to already be UTC.
        """
        if dt.tzinfo is None:
            return UTC.localize(dt)
        return dt.astimezone(UTC)

    @staticmethod
    def get_current_utc() -> datetime:
        """Get current time in UTC"""
        return datetime.now(UTC)

    @staticmethod
    def from_epoch_seconds(seconds: float) -> datetime:
        """
        Convert candle open time (epoch seconds) to UTC datetime

        Example:
            >>> TimeHandler.from_epoch_seconds(1700000000)
            datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=<UTC>)
        """
        return datetime.fromtimestamp(seconds, UTC)

    @staticmethod
    def from_epoch_ms(ms: int) -> datetime:
        """Convert order book timestamp (epoch milliseconds) to UTC datetime"""
        return datetime.fromtimestamp(ms / 1000, UTC)

    @staticmethod
    def to_epoch_ms(dt: datetime) -> int:
        """Convert datetime to epoch milliseconds"""
        return round(TimeHandler.ensure_utc(dt).timestamp() * 1000)

    @staticmethod
    def interval_to_seconds(interval: str) -> int:
        """
        Convert an exchange interval label to seconds

        Args:
            interval: Label like "15m", "1h", "4h", "1d"

        Returns:
            Interval length in seconds

        Raises:
            ValueError: Unknown label
        """
        unit = interval[-1:]
        amount = interval[:-1]
        if unit not in _INTERVAL_UNITS or not amount.isdigit() or int(amount) == 0:
            raise ValueError(f"Unsupported interval: {interval!r}")
        return int(amount) * _INTERVAL_UNITS[unit]

    @staticmethod
    def align_to_interval(seconds: int, interval: str) -> int:
        """Floor an epoch-seconds timestamp to its candle boundary"""
        step = TimeHandler.interval_to_seconds(interval)
        return seconds - (seconds % step)

    @staticmethod
    def format_utc(dt: Optional[datetime], format: str = "%Y-%m-%d %H:%M:%S %Z") -> str:
        """Format datetime in UTC for logs"""
        if dt is None:
            return "-"
        return TimeHandler.ensure_utc(dt).strftime(format)


# ========================
# Convenience Functions
# ========================
def now_utc() -> datetime:
    """Get current UTC time"""
    return TimeHandler.get_current_utc()


def now_ms() -> int:
    """Get current time as epoch milliseconds"""
    return TimeHandler.to_epoch_ms(now_utc())


def from_epoch_seconds(seconds: float) -> datetime:
    """Convert epoch seconds to UTC datetime"""
    return TimeHandler.from_epoch_seconds(seconds)


def to_epoch_ms(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds"""
    return TimeHandler.to_epoch_ms(dt)


def interval_to_seconds(interval: str) -> int:
    """Convert interval label to seconds"""
    return TimeHandler.interval_to_seconds(interval)
