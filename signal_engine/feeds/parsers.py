"""
Payload Parsers
Convert exchange-shaped kline and depth payloads into engine models

Kline rows:  [open_time_ms, open, high, low, close, volume, ...]
Depth:       {"bids": [[price, qty], ...], "asks": [[price, qty], ...]}

Numbers may be strings (as exchanges send them) or numerics.
"""

from typing import Any, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..analysis.errors import MalformedSnapshotError
from ..models.market import Candle, OrderBookEntry, OrderBookState
from ..utils.timeutils import now_ms as _now_ms


def parse_klines(payload: Sequence[Sequence[Any]]) -> List[Candle]:
    """
    Parse kline rows into candles

    Args:
        payload: List of kline rows

    Returns:
        Candles sorted by ascending time

    Raises:
        MalformedSnapshotError: Payload is not a list or a row is unusable
    """
    if not isinstance(payload, (list, tuple)):
        raise MalformedSnapshotError(f"Kline payload must be a list, got {type(payload).__name__}")

    candles = []
    for index, row in enumerate(payload):
        try:
            candles.append(Candle(
                time=int(row[0]) // 1000,
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5])
            ))
        except (IndexError, TypeError, ValueError, ValidationError) as e:
            raise MalformedSnapshotError(f"Bad kline row {index}: {row!r}") from e

    candles.sort(key=lambda c: c.time)
    return candles


def _parse_levels(levels: Any, side: str) -> List[OrderBookEntry]:
    if not isinstance(levels, (list, tuple)):
        raise MalformedSnapshotError(f"Depth '{side}' must be a list, got {type(levels).__name__}")

    entries = []
    for level in levels:
        try:
            entries.append(OrderBookEntry(price=float(level[0]), quantity=float(level[1])))
        except (IndexError, TypeError, ValueError, ValidationError) as e:
            raise MalformedSnapshotError(f"Bad {side} level: {level!r}") from e
    return entries


def parse_depth(payload: Mapping[str, Any], now_ms: Optional[int] = None) -> OrderBookState:
    """
    Parse a depth payload into an order book snapshot

    Args:
        payload: Mapping with "bids" and "asks" lists of [price, qty]
        now_ms: Snapshot time in epoch ms (default: wall clock)

    Returns:
        OrderBookState with bids descending and asks ascending

    Raises:
        MalformedSnapshotError: Missing sides or unusable price/quantity
    """
    if not isinstance(payload, Mapping):
        raise MalformedSnapshotError(f"Depth payload must be a mapping, got {type(payload).__name__}")
    if "bids" not in payload or "asks" not in payload:
        raise MalformedSnapshotError("Depth payload needs both 'bids' and 'asks'")

    bids = _parse_levels(payload["bids"], "bid")
    asks = _parse_levels(payload["asks"], "ask")

    return OrderBookState(
        bids=sorted(bids, key=lambda e: e.price, reverse=True),
        asks=sorted(asks, key=lambda e: e.price),
        last_update=_now_ms() if now_ms is None else now_ms
    )
