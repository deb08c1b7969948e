"""
Order Book Monitor
Fast polling loop feeding order book snapshots to the spoof detector
"""

import asyncio
import logging
from typing import List, Optional

from ..analysis.errors import MalformedSnapshotError
from ..analysis.orderbook_analyzer import OrderBookAnalyzer
from ..analysis.spoof_detector import SpoofDetector
from ..event_bus.bus import EventBus
from ..events.signal_events import SpoofAlertEvent
from ..feeds.base import MarketDataFeed
from ..models.market import OrderBookState
from ..models.signal import SpoofAlert

logger = logging.getLogger(__name__)


class OrderBookMonitor:
    """
    Order book polling loop for a single symbol

    Owns the symbol's SpoofDetector. Snapshots are timed by their own
    last_update so detection follows exchange time, not poll time.
    """

    def __init__(
        self,
        symbol: str,
        feed: MarketDataFeed,
        detector: Optional[SpoofDetector] = None,
        event_bus: Optional[EventBus] = None,
        depth: int = 20,
        interval_seconds: float = 5.0,
        spoof_stream: str = "spoof_alerts"
    ):
        self.symbol = symbol
        self.feed = feed
        self.detector = detector or SpoofDetector(symbol=symbol)
        self.event_bus = event_bus
        self.depth = depth
        self.interval_seconds = interval_seconds
        self.spoof_stream = spoof_stream

        self.analyzer = OrderBookAnalyzer()
        self.latest_book: Optional[OrderBookState] = None
        self.poll_count = 0

        self._lock = asyncio.Lock()
        self._running = False

    @property
    def latest_bias(self) -> float:
        return self.analyzer.calculate_bias(self.latest_book)

    def active_alert(self, now_ms: Optional[int] = None) -> Optional[SpoofAlert]:
        """Most recent unexpired spoof alert, for display"""
        return self.detector.active_alert(now_ms)

    async def run_once(self) -> List[SpoofAlert]:
        """
        Poll one snapshot and run spoof detection

        Returns:
            Alerts raised by this snapshot
        """
        async with self._lock:
            try:
                book = await self.feed.fetch_order_book(self.symbol, self.depth)
            except MalformedSnapshotError as e:
                logger.warning(f"⚠️ {self.symbol}: malformed order book ignored ({e})")
                return []

            self.poll_count += 1
            if book is None:
                return []

            self.latest_book = book
            alerts = self.detector.process_snapshot(book)

            if self.event_bus is not None:
                for alert in alerts:
                    try:
                        await self.event_bus.publish(SpoofAlertEvent.from_alert(self.symbol, alert), self.spoof_stream)
                    except Exception as e:
                        logger.error(f"❌ {self.symbol}: could not publish spoof alert: {e}")

            return alerts

    async def start(self):
        """Run the polling loop until stop() or cancellation"""
        logger.info(f"🚀 Order book monitor started for {self.symbol} (every {self.interval_seconds}s)")
        self._running = True

        try:
            while self._running:
                try:
                    await self.run_once()
                except Exception as e:
                    logger.error(f"❌ {self.symbol}: order book poll failed: {e}", exc_info=True)

                await asyncio.sleep(self.interval_seconds)
        finally:
            self._running = False
            logger.info(f"🛑 Order book monitor stopped for {self.symbol}")

    def stop(self):
        self._running = False
