"""
Spoof Detector
Flags large resting orders (walls) that are pulled within a short window

A wall that vanishes after more than `min_duration_ms` but before
`max_duration_ms` is reported. Shorter-lived walls are treated as noise,
longer-lived ones as genuine liquidity that was eventually filled or moved.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..models.market import OrderBookState
from ..models.signal import SpoofAlert
from ..utils.timeutils import now_ms as _now_ms
from .orderbook_analyzer import OrderBookAnalyzer, Wall

logger = logging.getLogger(__name__)


@dataclass
class TrackedWall:
    """Tracker entry: when the wall was first seen and how it looked last"""
    first_seen_ms: int
    side: str
    notional: float


class WallTracker:
    """
    Price level -> first-seen timestamp

    Owned by exactly one SpoofDetector (one per symbol).
    """

    def __init__(self):
        self._walls: Dict[float, TrackedWall] = {}

    def __len__(self) -> int:
        return len(self._walls)

    def __contains__(self, price: float) -> bool:
        return price in self._walls

    def first_seen(self, price: float) -> Optional[int]:
        wall = self._walls.get(price)
        return wall.first_seen_ms if wall else None

    def prices(self) -> List[float]:
        return list(self._walls)

    def observe(self, walls: List[Wall], now_ms: int) -> Dict[float, TrackedWall]:
        """
        Update the tracker with the walls of the current snapshot

        New prices start tracking at now_ms; known prices keep their
        first-seen time. Prices no longer present are removed.

        Returns:
            Removed entries keyed by price
        """
        current = {wall.price: wall for wall in walls}

        for price, wall in current.items():
            tracked = self._walls.get(price)
            if tracked is None:
                self._walls[price] = TrackedWall(
                    first_seen_ms=now_ms,
                    side=wall.side,
                    notional=wall.notional
                )
            else:
                tracked.side = wall.side
                tracked.notional = wall.notional

        vanished = {
            price: tracked
            for price, tracked in self._walls.items()
            if price not in current
        }
        for price in vanished:
            del self._walls[price]

        return vanished

    def clear(self) -> None:
        self._walls.clear()


class SpoofDetector:
    """
    Detect spoofing from successive order book snapshots

    Flow per snapshot:
    1. Collect walls (levels with notional > threshold) on both sides
    2. Start tracking walls not seen before
    3. For tracked walls now missing: alert if their lifetime is inside
       (min_duration_ms, max_duration_ms), then stop tracking them

    Calls are serialised; the tracker's remove/insert sequence must not
    interleave for one symbol.
    """

    def __init__(
        self,
        notional_threshold: float = 1_000_000.0,
        min_duration_ms: int = 2000,
        max_duration_ms: int = 15000,
        alert_ttl_ms: int = 5000,
        symbol: str = ""
    ):
        """
        Initialize detector

        Args:
            notional_threshold: Level notional above which it counts as a wall
            min_duration_ms: Walls pulled faster than this are ignored (noise)
            max_duration_ms: Walls living this long or longer are genuine
            alert_ttl_ms: How long an alert stays active for display
            symbol: Instrument this detector watches (logging only)
        """
        self.notional_threshold = notional_threshold
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms
        self.alert_ttl_ms = alert_ttl_ms
        self.symbol = symbol

        self.tracker = WallTracker()
        self.recent_alerts: Deque[SpoofAlert] = deque(maxlen=100)

        self._analyzer = OrderBookAnalyzer()
        self._lock = threading.Lock()

    def _coerce_snapshot(self, snapshot: Any) -> Optional[OrderBookState]:
        """Accept a parsed snapshot or a raw mapping; None when unusable"""
        if snapshot is None:
            return None
        if isinstance(snapshot, OrderBookState):
            return snapshot
        if isinstance(snapshot, Mapping):
            if "bids" not in snapshot or "asks" not in snapshot:
                logger.warning(f"⚠️ {self.symbol or 'book'}: ignoring snapshot without bids/asks")
                return None
            try:
                return OrderBookState.model_validate(snapshot)
            except ValidationError as e:
                logger.warning(f"⚠️ {self.symbol or 'book'}: ignoring malformed snapshot ({e.error_count()} errors)")
                return None

        logger.warning(f"⚠️ {self.symbol or 'book'}: ignoring snapshot of type {type(snapshot).__name__}")
        return None

    def is_spoof_duration(self, duration_ms: int) -> bool:
        """Lifetime strictly inside the spoofing window"""
        return self.min_duration_ms < duration_ms < self.max_duration_ms

    def process_snapshot(self, snapshot: Any, now_ms: Optional[int] = None) -> List[SpoofAlert]:
        """
        Feed one order book snapshot

        Args:
            snapshot: OrderBookState, raw mapping, or None
            now_ms: Observation time in epoch ms (default: the book's
                last_update, or the wall clock when that is unset)

        Returns:
            Alerts raised by this snapshot (usually zero or one)
        """
        book = self._coerce_snapshot(snapshot)
        if book is None:
            return []

        if now_ms is None:
            now_ms = book.last_update or _now_ms()

        with self._lock:
            walls = self._analyzer.find_walls(book, self.notional_threshold)
            vanished = self.tracker.observe(walls, now_ms)

            alerts = []
            for price, tracked in vanished.items():
                duration_ms = now_ms - tracked.first_seen_ms
                if not self.is_spoof_duration(duration_ms):
                    logger.debug(f"Wall at {price} gone after {duration_ms}ms, outside spoof window")
                    continue

                alert = SpoofAlert(
                    price=price,
                    side=tracked.side,
                    notional=tracked.notional,
                    duration_ms=duration_ms,
                    detected_at_ms=now_ms,
                    expires_at_ms=now_ms + self.alert_ttl_ms,
                    message=f"Spoof Alert: wall at {price:.2f} pulled in {duration_ms / 1000:.1f}s"
                )
                alerts.append(alert)
                self.recent_alerts.append(alert)
                logger.warning(f"🚨 {self.symbol} {alert.message} ({tracked.side}, ${tracked.notional:,.0f})")

        return alerts

    def active_alert(self, now_ms: Optional[int] = None) -> Optional[SpoofAlert]:
        """
        Most recent alert that has not expired

        Returns:
            SpoofAlert or None
        """
        if now_ms is None:
            now_ms = _now_ms()

        if self.recent_alerts and self.recent_alerts[-1].is_active(now_ms):
            return self.recent_alerts[-1]
        return None

    def reset(self) -> None:
        """Forget tracked walls and alerts"""
        with self._lock:
            self.tracker.clear()
            self.recent_alerts.clear()


if __name__ == "__main__":
    """
    Walk through a wall being placed and pulled
    Run: python -m signal_engine.analysis.spoof_detector
    """
    detector = SpoofDetector(symbol="BTCUSDT")

    with_wall = OrderBookState.from_levels(
        bids=[(100_000.0, 25.0), (99_990.0, 0.5)],
        asks=[(100_010.0, 0.4)],
        last_update=0
    )
    without_wall = OrderBookState.from_levels(
        bids=[(99_990.0, 0.5)],
        asks=[(100_010.0, 0.4)],
        last_update=10_000
    )

    print("=" * 70)
    print("Spoof Detector Demo")
    print("=" * 70)
    print(f"t=0s   walls: {detector.process_snapshot(with_wall, now_ms=0)} tracked={detector.tracker.prices()}")
    for alert in detector.process_snapshot(without_wall, now_ms=10_000):
        print(f"t=10s  {alert.message}")
    print(f"Active at t=12s: {detector.active_alert(now_ms=12_000)}")
    print(f"Active at t=16s: {detector.active_alert(now_ms=16_000)}")
