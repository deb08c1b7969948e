"""
Analysis Service
Periodically runs the full market analysis for one symbol

Flow per tick:
1. Fetch entry and trend timeframe candles plus the order book
2. Run MarketAnalyzer
3. Track status changes (fresh ACTIVE signals)
4. Publish AnalysisCompletedEvent / SignalActivatedEvent
"""

import asyncio
import logging
from typing import Optional

from ..analysis.errors import AnalysisError, MalformedSnapshotError
from ..analysis.market_analyzer import MarketAnalyzer
from ..analysis.signal_state import SignalStateTracker
from ..event_bus.bus import EventBus
from ..events.base import BaseEvent
from ..events.signal_events import AnalysisCompletedEvent, SignalActivatedEvent
from ..feeds.base import MarketDataFeed
from ..models.market import OrderBookState
from ..models.signal import AnalysisResult, SignalStatus

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Polling analysis loop for a single symbol

    A failed or degenerate cycle produces no new result; latest_result keeps
    the previous one for display.
    """

    def __init__(
        self,
        symbol: str,
        feed: MarketDataFeed,
        analyzer: MarketAnalyzer,
        event_bus: Optional[EventBus] = None,
        entry_timeframe: str = "15m",
        trend_timeframe: str = "1h",
        candle_limit: int = 200,
        order_book_depth: int = 20,
        interval_seconds: float = 30.0,
        analysis_stream: str = "analysis",
        signal_stream: str = "signals"
    ):
        """
        Initialize analysis service

        Args:
            symbol: Instrument symbol
            feed: Market data source
            analyzer: Configured MarketAnalyzer
            event_bus: Event bus for publishing (None = don't publish)
            entry_timeframe: Entry candle interval
            trend_timeframe: Trend candle interval
            candle_limit: Candles requested per timeframe
            order_book_depth: Order book levels per side
            interval_seconds: Seconds between runs
            analysis_stream: Stream for every result
            signal_stream: Stream for fresh ACTIVE signals
        """
        self.symbol = symbol
        self.feed = feed
        self.analyzer = analyzer
        self.event_bus = event_bus
        self.entry_timeframe = entry_timeframe
        self.trend_timeframe = trend_timeframe
        self.candle_limit = candle_limit
        self.order_book_depth = order_book_depth
        self.interval_seconds = interval_seconds
        self.analysis_stream = analysis_stream
        self.signal_stream = signal_stream

        self.state = SignalStateTracker(symbol)
        self.latest_result: Optional[AnalysisResult] = None
        self.run_count = 0
        self.error_count = 0

        self._lock = asyncio.Lock()
        self._running = False

    async def _fetch_order_book(self) -> Optional[OrderBookState]:
        """Order book or None; a malformed book counts as no book"""
        try:
            return await self.feed.fetch_order_book(self.symbol, self.order_book_depth)
        except MalformedSnapshotError as e:
            logger.warning(f"⚠️ {self.symbol}: malformed order book, analysing without it ({e})")
            return None

    async def _publish(self, event: BaseEvent, stream_name: str) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(event, stream_name)
        except Exception as e:
            logger.error(f"❌ {self.symbol}: could not publish {event.event_type}: {e}")

    def _log_result(self, result: AnalysisResult, activated: bool) -> None:
        if result.status == SignalStatus.ACTIVE:
            icon = "🚨"
        elif result.status == SignalStatus.POTENTIAL:
            icon = "👀"
        else:
            icon = "⏸️"

        log_msg = (
            f"{icon} {self.symbol} | {result.regime.value}/{result.trend.value} | "
            f"{result.status.value} {result.direction.value} | "
            f"Score: {result.confidence_score} | RSI: {result.rsi:.1f} | "
            f"Bias: {result.order_book_bias:+.2f} | Price: {result.price:.2f}"
        )

        if activated:
            logger.warning(log_msg)
            logger.warning(f"   Confirmations: {', '.join(result.confirmations)}")
            logger.warning(
                f"   Entry: {result.entry_price:.2f} | SL: {result.stop_loss:.2f} | "
                f"TPs: {', '.join(f'{tp:.2f}' for tp in result.take_profits)} | R:R {result.risk_reward}"
            )
        else:
            logger.info(log_msg)

    async def run_once(self) -> Optional[AnalysisResult]:
        """
        Run one analysis cycle

        Returns:
            The new result, or None when the cycle produced none
        """
        async with self._lock:
            try:
                entry_candles = await self.feed.fetch_candles(self.symbol, self.entry_timeframe, self.candle_limit)
                trend_candles = await self.feed.fetch_candles(self.symbol, self.trend_timeframe, self.candle_limit)
                order_book = await self._fetch_order_book()

                result = self.analyzer.analyze(entry_candles, trend_candles, order_book)
            except AnalysisError as e:
                self.error_count += 1
                logger.warning(f"⚠️ {self.symbol}: analysis skipped: {e}")
                return None

            previous_status = self.state.previous_status
            activated = self.state.update(result)
            self.latest_result = result
            self.run_count += 1

            self._log_result(result, activated)

            await self._publish(AnalysisCompletedEvent.from_result(self.symbol, result), self.analysis_stream)
            if activated:
                await self._publish(
                    SignalActivatedEvent.from_result(self.symbol, result, previous_status=previous_status.value),
                    self.signal_stream
                )

            return result

    async def start(self):
        """Run the polling loop until stop() or cancellation"""
        logger.info(
            f"🚀 Analysis service started for {self.symbol} "
            f"({self.entry_timeframe}/{self.trend_timeframe}, every {self.interval_seconds}s)"
        )
        self._running = True

        try:
            while self._running:
                try:
                    await self.run_once()
                except Exception as e:
                    self.error_count += 1
                    logger.error(f"❌ {self.symbol}: analysis cycle failed: {e}", exc_info=True)

                await asyncio.sleep(self.interval_seconds)
        finally:
            self._running = False
            logger.info(f"🛑 Analysis service stopped for {self.symbol}")

    def stop(self):
        """Stop after the current cycle"""
        self._running = False
