"""
Market Data Feeds
"""

from .base import MarketDataFeed
from .mock_feed import MockMarketFeed
from .parsers import parse_depth, parse_klines

__all__ = [
    "MarketDataFeed",
    "MockMarketFeed",
    "parse_depth",
    "parse_klines",
]
