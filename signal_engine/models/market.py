"""
Market Data Models
Candles and order book snapshots as consumed by the analysis engine
"""

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Candle(BaseModel):
    """
    Single OHLCV candle

    Immutable once produced. Sequences are ordered by ascending time.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    time: int = Field(description="Candle open time (epoch seconds)")
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(default=0.0, ge=0)


class OrderBookEntry(BaseModel):
    """Single price level: total is the notional value (price * quantity)"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    price: float = Field(gt=0)
    quantity: float = Field(ge=0)
    total: float = Field(
        default=0.0,
        ge=0,
        description="Notional value, derived from price * quantity when omitted"
    )

    @model_validator(mode="before")
    @classmethod
    def fill_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("total") is None:
            try:
                data = {**data, "total": float(data["price"]) * float(data["quantity"])}
            except (KeyError, TypeError, ValueError):
                # Leave it to field validation to report the bad level
                pass
        return data


class OrderBookState(BaseModel):
    """
    Order book snapshot

    A full snapshot, not a diff: each observation replaces the previous one.
    Bids are descending by price, asks ascending.
    """

    model_config = ConfigDict(frozen=True)

    bids: List[OrderBookEntry] = Field(default_factory=list)
    asks: List[OrderBookEntry] = Field(default_factory=list)
    last_update: int = Field(default=0, description="Snapshot time (epoch milliseconds)")

    @classmethod
    def from_levels(
        cls,
        bids: List[Tuple[float, float]],
        asks: List[Tuple[float, float]],
        last_update: int = 0
    ) -> "OrderBookState":
        """
        Build a snapshot from (price, quantity) pairs

        Levels are sorted into book order.
        """
        bid_entries = [OrderBookEntry(price=p, quantity=q) for p, q in bids]
        ask_entries = [OrderBookEntry(price=p, quantity=q) for p, q in asks]
        return cls(
            bids=sorted(bid_entries, key=lambda e: e.price, reverse=True),
            asks=sorted(ask_entries, key=lambda e: e.price),
            last_update=last_update
        )

    @property
    def best_bid(self) -> Optional[float]:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[float]:
        return self.asks[0].price if self.asks else None

    def is_empty(self) -> bool:
        return not self.bids and not self.asks
