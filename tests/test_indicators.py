"""
Indicator Tests
EMA, RSI (incl. degenerate windows) and swing levels
"""

import random

import pytest

from signal_engine.analysis.errors import InsufficientDataError
from signal_engine.analysis.indicators import IndicatorCalculator, ema, rsi, swing_levels

from conftest import make_candles


class TestEMA:
    """EMA seeding and recurrence"""

    def test_constant_series_is_constant(self):
        """EMA of a constant price equals that price at every index"""
        candles = make_candles([42.5] * 30)
        assert ema(candles, 9) == [42.5] * 30

    def test_known_values(self):
        """k = 2 / (3 + 1) = 0.5"""
        candles = make_candles([1.0, 2.0, 3.0])
        assert ema(candles, 3) == pytest.approx([1.0, 1.5, 2.25])

    def test_seed_is_first_close(self):
        candles = make_candles([10.0, 20.0])
        assert ema(candles, 21)[0] == 10.0

    def test_same_length_as_input(self):
        candles = make_candles([float(i) for i in range(1, 51)])
        assert len(ema(candles, 21)) == 50

    def test_empty_raises(self):
        with pytest.raises(InsufficientDataError):
            ema([], 9)

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            ema(make_candles([1.0, 2.0]), 0)


class TestRSI:
    """RSI with Wilder smoothing"""

    def test_known_values(self):
        """Seed 50 from +1/-1, then +1 smooths to gain 0.75 / loss 0.25"""
        candles = make_candles([1.0, 2.0, 1.0, 2.0])
        assert rsi(candles, 2) == pytest.approx([50.0, 75.0])

    def test_output_length(self):
        candles = make_candles([100.0 + (i % 3) for i in range(50)])
        assert len(rsi(candles, 14)) == 50 - 14

    def test_bounds_on_random_walk(self):
        """RSI stays within [0, 100]"""
        rng = random.Random(1)
        closes = [100.0]
        for _ in range(300):
            closes.append(closes[-1] * (1 + rng.gauss(0, 0.01)))

        values = rsi(make_candles(closes), 14)
        assert all(0.0 <= value <= 100.0 for value in values)

    def test_only_gains_saturates_at_100(self):
        """No losses in the window: RSI is 100, never inf/NaN"""
        candles = make_candles([100.0 + i for i in range(30)])
        assert rsi(candles, 14) == [100.0] * 16

    def test_flat_window_is_neutral(self):
        candles = make_candles([100.0] * 30)
        assert rsi(candles, 14) == [50.0] * 16

    def test_only_losses_is_zero(self):
        candles = make_candles([100.0 - i for i in range(30)])
        assert all(value == pytest.approx(0.0) for value in rsi(candles, 14))

    def test_needs_more_than_period_candles(self):
        with pytest.raises(InsufficientDataError) as exc_info:
            rsi(make_candles([100.0] * 14), 14)

        assert exc_info.value.required == 15
        assert exc_info.value.available == 14

    def test_rsi_from_averages(self):
        assert IndicatorCalculator.rsi_from_averages(1.0, 1.0) == pytest.approx(50.0)
        assert IndicatorCalculator.rsi_from_averages(0.5, 0.0) == 100.0
        assert IndicatorCalculator.rsi_from_averages(0.0, 0.0) == 50.0


class TestSwingLevels:
    """Swing low/high over the lookback window"""

    def test_uses_last_lookback_bars(self):
        candles = make_candles([50.0, 100.0, 101.0, 102.0, 103.0], wick=0.0)
        low, high = swing_levels(candles, lookback=3)

        # Bar 1 (low 50) falls outside the window; bar 2 opens at 100
        assert low == 100.0
        assert high == 103.0

    def test_lookback_longer_than_series(self):
        candles = make_candles([10.0, 12.0, 11.0], wick=1.0)
        assert swing_levels(candles, lookback=10) == (9.0, 13.0)

    def test_empty_raises(self):
        with pytest.raises(InsufficientDataError):
            swing_levels([], 10)

    def test_last_helpers(self):
        candles = make_candles([100.0 + i for i in range(30)])
        assert IndicatorCalculator.last_ema(candles, 9) == ema(candles, 9)[-1]
        assert IndicatorCalculator.last_rsi(candles, 14) == 100.0
