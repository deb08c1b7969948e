"""
Feed Tests
Payload parsing and the mock market feed
"""

import asyncio

import pytest

from signal_engine.analysis.errors import MalformedSnapshotError
from signal_engine.analysis.orderbook_analyzer import OrderBookAnalyzer
from signal_engine.feeds.mock_feed import MockMarketFeed
from signal_engine.feeds.parsers import parse_depth, parse_klines


class TestParseKlines:
    """Exchange kline rows -> Candle"""

    def test_string_rows(self):
        payload = [
            [1_700_000_900_000, "101.0", "103.0", "100.5", "102.5", "12.5", 1_700_000_959_999, "1280.0"],
            [1_700_000_000_000, "100.0", "101.5", "99.0", "101.0", "10.0", 1_700_000_059_999, "1005.0"],
        ]
        candles = parse_klines(payload)

        assert [c.time for c in candles] == [1_700_000_000, 1_700_000_900]
        assert candles[0].open == 100.0
        assert candles[0].close == 101.0
        assert candles[1].high == 103.0
        assert candles[1].volume == 12.5

    def test_numeric_rows(self):
        candles = parse_klines([[60_000, 1, 2, 0.5, 1.5, 3]])
        assert candles[0].time == 60
        assert candles[0].close == 1.5

    def test_empty_payload(self):
        assert parse_klines([]) == []

    def test_short_row_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_klines([[60_000, "1", "2"]])

    def test_non_numeric_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_klines([[60_000, "x", "2", "1", "1", "1"]])

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
    def test_non_finite_close_raises(self, value):
        with pytest.raises(MalformedSnapshotError):
            parse_klines([[60_000, "1", "2", "0.5", value, "3"]])

    def test_non_list_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_klines({"error": "rate limited"})


class TestParseDepth:
    """Exchange depth payload -> OrderBookState"""

    def test_levels_are_sorted_and_totalled(self):
        payload = {
            "lastUpdateId": 1027024,
            "bids": [["99.0", "2.0"], ["100.0", "1.0"]],
            "asks": [["102.0", "1.5"], ["101.0", "3.0"]],
        }
        book = parse_depth(payload, now_ms=1_234)

        assert [level.price for level in book.bids] == [100.0, 99.0]
        assert [level.price for level in book.asks] == [101.0, 102.0]
        assert book.bids[1].total == 198.0
        assert book.asks[0].total == 303.0
        assert book.last_update == 1_234

    def test_missing_side_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_depth({"bids": [["100.0", "1.0"]]})

    def test_bad_level_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_depth({"bids": [["100.0"]], "asks": []})

    def test_infinite_quantity_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_depth({"bids": [["100.0", "inf"]], "asks": []})

    def test_negative_quantity_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_depth({"bids": [["100.0", "-1"]], "asks": []})

    def test_non_mapping_raises(self):
        with pytest.raises(MalformedSnapshotError):
            parse_depth(None)


class TestMockMarketFeed:
    """Synthetic data shape and determinism"""

    def test_candles_shape(self):
        candles = asyncio.run(MockMarketFeed().fetch_candles("BTCUSDT", "15m", 120))

        assert len(candles) == 120
        assert all(b.time - a.time == 900 for a, b in zip(candles, candles[1:]))
        assert all(c.low <= min(c.open, c.close) and c.high >= max(c.open, c.close) for c in candles)

    def test_candles_are_deterministic(self):
        first = asyncio.run(MockMarketFeed(seed=3).fetch_candles("ETHUSDT", "1h", 60))
        second = asyncio.run(MockMarketFeed(seed=3).fetch_candles("ETHUSDT", "1h", 60))
        assert [c.close for c in first] == [c.close for c in second]

    def test_forming_candle_moves_between_polls(self):
        feed = MockMarketFeed(seed=5, clock=lambda: 1_700_000_000_000)

        async def poll_twice():
            return await feed.fetch_candles("BTCUSDT", "15m", 60), await feed.fetch_candles("BTCUSDT", "15m", 60)

        first, second = asyncio.run(poll_twice())

        assert [c.time for c in first] == [c.time for c in second]
        assert [c.close for c in first[:-1]] == [c.close for c in second[:-1]]
        assert first[-1].open == second[-1].open
        assert first[-1].close != second[-1].close

    def test_walk_continues_into_new_candles(self):
        now = {"ms": 1_700_000_000_000}
        feed = MockMarketFeed(seed=5, clock=lambda: now["ms"])

        first = asyncio.run(feed.fetch_candles("BTCUSDT", "15m", 60))
        now["ms"] += 2 * 900 * 1000
        second = asyncio.run(feed.fetch_candles("BTCUSDT", "15m", 60))

        assert second[-1].time - first[-1].time == 1_800
        assert second[:-2] == first[2:]
        assert second[-2].open == first[-1].close
        assert second[-1].open == second[-2].close

    def test_order_book_uses_feed_clock(self):
        feed = MockMarketFeed(wall_probability=0.0, clock=lambda: 1_234_000)
        assert asyncio.run(feed.fetch_order_book("BTCUSDT", 5)).last_update == 1_234_000

    def test_order_book_shape(self):
        book = asyncio.run(MockMarketFeed(wall_probability=0.0).fetch_order_book("SOLUSDT", 20))

        assert len(book.bids) == 20
        assert len(book.asks) == 20
        assert book.best_bid < book.best_ask
        assert book.last_update > 0

    def test_flashing_wall(self):
        feed = MockMarketFeed(wall_probability=1.0, wall_notional=2_500_000.0)
        book = asyncio.run(feed.fetch_order_book("BTCUSDT", 20))

        walls = OrderBookAnalyzer().find_walls(book, threshold=1_000_000.0)
        assert len(walls) == 1
        assert walls[0].notional == pytest.approx(2_500_000.0, rel=1e-3)
