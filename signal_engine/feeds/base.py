"""
Market Data Feed
Boundary between the engine and whatever delivers candles and order books
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.market import Candle, OrderBookState


class MarketDataFeed(ABC):
    """
    Source of market data snapshots

    Implementations own transport, retries and rate limiting. The engine
    only ever sees parsed Candle lists and OrderBookState snapshots.
    """

    @abstractmethod
    async def fetch_candles(self, symbol: str, interval: str, limit: int = 200) -> List[Candle]:
        """
        Latest candles for a symbol

        Args:
            symbol: Instrument symbol, e.g. "BTCUSDT"
            interval: Candle interval label, e.g. "15m", "1h"
            limit: Maximum number of candles

        Returns:
            Candles in ascending time order (may be fewer than limit)
        """

    @abstractmethod
    async def fetch_order_book(self, symbol: str, depth: int = 20) -> Optional[OrderBookState]:
        """
        Current order book snapshot

        Returns:
            OrderBookState, or None when no book is available

        Raises:
            MalformedSnapshotError: Payload could not be parsed
        """

    async def close(self) -> None:
        """Release transport resources"""
