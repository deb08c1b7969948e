"""
Shared builders and fakes for the test suite
"""

from typing import List, Optional, Sequence

import pytest

from signal_engine.feeds.base import MarketDataFeed
from signal_engine.models.market import Candle, OrderBookEntry, OrderBookState
from signal_engine.models.signal import (
    AnalysisResult,
    Direction,
    MarketRegime,
    SignalStatus,
    TrendDirection,
)


# ========================
# Builders
# ========================
def make_candles(closes: Sequence[float], step: int = 900, wick: float = 0.5) -> List[Candle]:
    """Candles where open = previous close and wicks extend `wick` beyond the body"""
    candles = []
    previous = closes[0]
    for i, close in enumerate(closes):
        candles.append(Candle(
            time=i * step,
            open=previous,
            high=max(previous, close) + wick,
            low=min(previous, close) - wick,
            close=close,
            volume=10.0
        ))
        previous = close
    return candles


def zigzag_closes(start: float, up: float, down: float, count: int) -> List[float]:
    """Alternate +up / -down moves, starting with +up"""
    closes = []
    close = start
    for i in range(count):
        close += up if i % 2 == 0 else -down
        closes.append(close)
    return closes


def make_book(bid_total: float, ask_total: float, last_update: int = 0) -> OrderBookState:
    """Single-level book with exact notional totals per side"""
    return OrderBookState(
        bids=[OrderBookEntry(price=99.9, quantity=1.0, total=bid_total)],
        asks=[OrderBookEntry(price=100.1, quantity=1.0, total=ask_total)],
        last_update=last_update
    )


def make_result(status: SignalStatus, direction: Direction = Direction.NONE) -> AnalysisResult:
    return AnalysisResult(
        regime=MarketRegime.NORMAL_TREND,
        trend=TrendDirection.BULLISH,
        rsi=50.0,
        ema9=101.0,
        ema21=100.0,
        order_book_bias=0.0,
        status=status,
        direction=direction,
        confidence_score=0,
        price=100.0,
        entry_price=100.0,
        stop_loss=0.0,
        take_profits=(),
        risk_reward=0.0,
        confirmations=(),
        blocking_reasons=()
    )


# ========================
# Fakes
# ========================
class FakeFeed(MarketDataFeed):
    """In-memory feed: fixed candles, queued order books (or exceptions)"""

    def __init__(self, entry: List[Candle], trend: List[Candle], books: Optional[list] = None, entry_interval: str = "15m"):
        self.entry = entry
        self.trend = trend
        self.books = list(books or [])
        self.entry_interval = entry_interval
        self.closed = False

    async def fetch_candles(self, symbol: str, interval: str, limit: int = 200) -> List[Candle]:
        candles = self.entry if interval == self.entry_interval else self.trend
        return candles[-limit:]

    async def fetch_order_book(self, symbol: str, depth: int = 20) -> Optional[OrderBookState]:
        if not self.books:
            return None
        book = self.books.pop(0) if len(self.books) > 1 else self.books[0]
        if isinstance(book, Exception):
            raise book
        return book

    async def close(self) -> None:
        self.closed = True


class FakeEventBus:
    """Records published events instead of talking to Redis"""

    def __init__(self, fail: bool = False):
        self.published = []
        self.fail = fail
        self.connected = False

    async def connect(self):
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def publish(self, event, stream_name: str) -> str:
        if self.fail:
            raise ConnectionError("redis down")
        self.published.append((stream_name, event))
        return f"{len(self.published)}-0"

    def on(self, stream_name: str) -> list:
        return [event for stream, event in self.published if stream == stream_name]


# ========================
# Fixtures
# ========================
@pytest.fixture
def bullish_entry_candles() -> List[Candle]:
    """Rising zigzag: RSI in value zone, last close above EMA21"""
    return make_candles(zigzag_closes(100.0, 1.5, 1.0, 60))


@pytest.fixture
def bearish_entry_candles() -> List[Candle]:
    """Falling zigzag: RSI in value zone, last close below EMA21"""
    return make_candles(zigzag_closes(200.0, -1.5, -1.0, 60))


@pytest.fixture
def uptrend_candles() -> List[Candle]:
    return make_candles([100.0 + i for i in range(60)], step=3600)


@pytest.fixture
def downtrend_candles() -> List[Candle]:
    return make_candles([200.0 - i for i in range(60)], step=3600)


@pytest.fixture
def flat_candles() -> List[Candle]:
    return make_candles([100.0] * 60, step=3600)
