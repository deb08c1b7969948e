"""
Mock Market Feed
Deterministic synthetic candles and order books for demos and tests

Prices follow a seeded random walk with mild mean reversion. Each
(symbol, interval) series keeps its own generator and continues between
polls: the forming candle moves on every fetch and a new candle opens when
the interval rolls over. The order book now and then carries a large
"flashing" wall that is pulled after a few polls, which is what the spoof
detector looks for.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..models.market import Candle, OrderBookState
from ..utils.timeutils import TimeHandler, now_ms
from .base import MarketDataFeed
from .parsers import parse_depth, parse_klines

logger = logging.getLogger(__name__)


DEFAULT_BASE_PRICES = {
    "BTCUSDT": 65_000.0,
    "ETHUSDT": 3_200.0,
    "SOLUSDT": 150.0,
}

# Candles kept per series
MAX_HISTORY = 1000


@dataclass
class _FlashWall:
    price: float
    quantity: float
    side: str
    polls_left: int


@dataclass
class _CandleSeries:
    """Walk state of one (symbol, interval) series; rows are [open_ms, o, h, l, c, v]"""
    rng: random.Random
    step: int
    rows: List[list] = field(default_factory=list)


class MockMarketFeed(MarketDataFeed):
    """Generate synthetic market data shaped like exchange REST payloads"""

    def __init__(
        self,
        seed: int = 42,
        volatility: float = 0.004,
        wall_probability: float = 0.15,
        wall_notional: float = 2_500_000.0,
        base_prices: Optional[Dict[str, float]] = None,
        clock: Callable[[], int] = now_ms
    ):
        """
        Initialize mock feed

        Args:
            seed: Random seed (same seed, same data)
            volatility: Per-candle return standard deviation
            wall_probability: Chance per book poll of a new flashing wall
            wall_notional: Notional of a flashing wall
            base_prices: Starting price per symbol (unknown symbols start at 100)
            clock: Current time in epoch ms
        """
        self.seed = seed
        self.volatility = volatility
        self.wall_probability = wall_probability
        self.wall_notional = wall_notional
        self.base_prices = dict(base_prices or DEFAULT_BASE_PRICES)
        self.clock = clock

        self._rng = random.Random(seed)
        self._series: Dict[Tuple[str, str], _CandleSeries] = {}
        self._last_price: Dict[str, float] = {}
        self._walls: Dict[str, _FlashWall] = {}

    def _base_price(self, symbol: str) -> float:
        return self.base_prices.get(symbol, 100.0)

    def _next_row(self, series: _CandleSeries, base: float, open_ms: int, price: float) -> list:
        """One full candle walking from `price`"""
        rng = series.rng
        change = price * rng.gauss(0, self.volatility) + (base - price) * 0.02
        close = max(price + change, base * 0.5)
        high = max(price, close) * (1 + abs(rng.gauss(0, self.volatility / 3)))
        low = min(price, close) * (1 - abs(rng.gauss(0, self.volatility / 3)))
        return [open_ms, price, high, low, close, rng.uniform(50, 500)]

    def _tick_forming(self, series: _CandleSeries, base: float):
        """Move the close of the still-open last candle"""
        row = series.rows[-1]
        close = max(row[4] * (1 + series.rng.gauss(0, self.volatility / 4)), base * 0.5)
        row[2] = max(row[2], close)
        row[3] = min(row[3], close)
        row[4] = close
        row[5] += series.rng.uniform(1, 20)

    def _advance_series(self, symbol: str, interval: str, limit: int) -> _CandleSeries:
        """Create the series on first use, otherwise roll it forward to the current interval"""
        key = (symbol, interval)
        base = self._base_price(symbol)
        end_seconds = TimeHandler.align_to_interval(self.clock() // 1000, interval)

        series = self._series.get(key)
        if series is None:
            series = _CandleSeries(
                rng=random.Random(f"{self.seed}:{symbol}:{interval}"),
                step=TimeHandler.interval_to_seconds(interval)
            )
            start = end_seconds - series.step * (limit - 1)
            price = base
            for i in range(limit):
                row = self._next_row(series, base, (start + i * series.step) * 1000, price)
                series.rows.append(row)
                price = row[4]
            self._series[key] = series
            return series

        last_open = series.rows[-1][0] // 1000
        if last_open >= end_seconds:
            self._tick_forming(series, base)
        else:
            for open_seconds in range(last_open + series.step, end_seconds + 1, series.step):
                row = self._next_row(series, base, open_seconds * 1000, series.rows[-1][4])
                series.rows.append(row)
            del series.rows[:-MAX_HISTORY]

        return series

    async def fetch_candles(self, symbol: str, interval: str, limit: int = 200) -> List[Candle]:
        series = self._advance_series(symbol, interval, limit)
        payload = [
            [row[0], f"{row[1]:.2f}", f"{row[2]:.2f}", f"{row[3]:.2f}", f"{row[4]:.2f}", f"{row[5]:.3f}"]
            for row in series.rows[-limit:]
        ]
        candles = parse_klines(payload)
        if candles:
            self._last_price.setdefault(symbol, candles[-1].close)
        return candles

    def _generate_depth(self, symbol: str, depth: int) -> dict:
        """Depth payload around the current mid price"""
        mid = self._last_price.get(symbol, self._base_price(symbol))
        mid *= 1 + self._rng.gauss(0, self.volatility / 5)
        self._last_price[symbol] = mid

        tick = max(mid * 0.0001, 0.01)
        typical_qty = 20_000.0 / mid

        bids = [[f"{mid - tick * (i + 1):.2f}", f"{typical_qty * self._rng.uniform(0.2, 3.0):.4f}"] for i in range(depth)]
        asks = [[f"{mid + tick * (i + 1):.2f}", f"{typical_qty * self._rng.uniform(0.2, 3.0):.4f}"] for i in range(depth)]

        wall = self._walls.get(symbol)
        if wall is None and self._rng.random() < self.wall_probability:
            side = self._rng.choice(["bid", "ask"])
            offset = tick * self._rng.randint(3, max(3, depth - 1))
            price = round(mid - offset if side == "bid" else mid + offset, 2)
            wall = _FlashWall(
                price=price,
                quantity=self.wall_notional / price,
                side=side,
                polls_left=self._rng.randint(1, 4)
            )
            self._walls[symbol] = wall
            logger.debug(f"🧱 {symbol}: placing {side} wall at {price}")

        if wall is not None:
            levels = bids if wall.side == "bid" else asks
            levels.append([f"{wall.price:.2f}", f"{wall.quantity:.4f}"])
            wall.polls_left -= 1
            if wall.polls_left <= 0:
                del self._walls[symbol]

        return {"bids": bids, "asks": asks}

    async def fetch_order_book(self, symbol: str, depth: int = 20) -> Optional[OrderBookState]:
        return parse_depth(self._generate_depth(symbol, depth), now_ms=self.clock())
