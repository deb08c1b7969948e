"""
Order Book Analyzer
Reduces an order book snapshot to liquidity metrics and wall listings
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models.market import OrderBookEntry, OrderBookState


# Display thresholds for single levels (notional, quote currency)
WHALE_LEVEL_NOTIONAL = 500_000.0
MEGA_WALL_NOTIONAL = 20_000_000.0


@dataclass(frozen=True)
class Wall:
    """A single price level with large resting notional"""
    price: float
    side: str  # "bid" or "ask"
    quantity: float
    notional: float


class OrderBookAnalyzer:
    """
    Analyze order book snapshots

    Key Functions:
    1. Bid/ask notional totals
    2. Liquidity bias: (bids - asks) / (bids + asks)
    3. Bid-ask spread
    4. Wall detection (levels above a notional threshold)
    """

    def calculate_side_totals(self, book: Optional[OrderBookState]) -> Tuple[float, float]:
        """
        Total resting notional per side

        Args:
            book: Order book snapshot (may be None)

        Returns:
            (bid_total, ask_total) tuple
        """
        if book is None:
            return 0.0, 0.0

        bid_total = sum(level.total for level in book.bids)
        ask_total = sum(level.total for level in book.asks)
        return bid_total, ask_total

    def calculate_bias(self, book: Optional[OrderBookState]) -> float:
        """
        Calculate order book bias

        bias = (bid_total - ask_total) / (bid_total + ask_total)

        Interpretation:
        - > 0: Bid heavy (buy-side dominance)
        - < 0: Ask heavy (sell-side dominance)
        - 0:   Balanced, or no book / no volume

        Args:
            book: Order book snapshot (may be None)

        Returns:
            Bias in [-1, 1]
        """
        bid_total, ask_total = self.calculate_side_totals(book)
        total = bid_total + ask_total
        if total == 0:
            return 0.0

        return (bid_total - ask_total) / total

    def calculate_spread(self, book: Optional[OrderBookState]) -> float:
        """
        Calculate bid-ask spread

        Spread = (best_ask - best_bid) / best_bid

        Returns:
            Spread as decimal (e.g., 0.0002 = 0.02%), 0 if a side is empty
        """
        if book is None or book.best_bid is None or book.best_ask is None:
            return 0.0

        return (book.best_ask - book.best_bid) / book.best_bid

    def find_walls(self, book: Optional[OrderBookState], threshold: float) -> List[Wall]:
        """
        List levels whose notional exceeds the threshold

        Args:
            book: Order book snapshot (may be None)
            threshold: Notional value a level must exceed

        Returns:
            Walls, bids first then asks, in book order
        """
        if book is None:
            return []

        walls = [
            self._to_wall(level, "bid")
            for level in book.bids
            if level.total > threshold
        ]
        walls.extend(
            self._to_wall(level, "ask")
            for level in book.asks
            if level.total > threshold
        )
        return walls

    @staticmethod
    def classify_level(level: OrderBookEntry) -> str:
        """
        Size class of a single level

        Returns:
            "mega_wall", "whale" or "normal"
        """
        if level.total > MEGA_WALL_NOTIONAL:
            return "mega_wall"
        if level.total > WHALE_LEVEL_NOTIONAL:
            return "whale"
        return "normal"

    @staticmethod
    def _to_wall(level: OrderBookEntry, side: str) -> Wall:
        return Wall(price=level.price, side=side, quantity=level.quantity, notional=level.total)

    def analyze_order_book(self, book: Optional[OrderBookState]) -> dict:
        """
        Complete order book analysis

        Returns all metrics in one call
        """
        bid_total, ask_total = self.calculate_side_totals(book)
        levels = [] if book is None else [*book.bids, *book.asks]

        return {
            "bid_total": bid_total,
            "ask_total": ask_total,
            "bias": self.calculate_bias(book),
            "spread": self.calculate_spread(book),
            "best_bid": book.best_bid if book else None,
            "best_ask": book.best_ask if book else None,
            "whale_levels": sum(1 for level in levels if self.classify_level(level) == "whale"),
            "mega_walls": sum(1 for level in levels if self.classify_level(level) == "mega_wall"),
        }
