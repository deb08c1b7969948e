"""
Signal Scorer and Risk Target Tests
"""

import pytest

from signal_engine.analysis.errors import ArithmeticDegenerateError
from signal_engine.analysis.risk_calculator import RiskTargetCalculator
from signal_engine.analysis.signal_scorer import SignalScorer
from signal_engine.models.signal import Direction, MarketRegime, TrendDirection

from conftest import make_candles


STRONG = MarketRegime.STRONG_TREND
CHOP = MarketRegime.RANGE_CHOP
BULL = TrendDirection.BULLISH
BEAR = TrendDirection.BEARISH
FLAT = TrendDirection.NEUTRAL


class TestBranchSelection:
    """Which side gets evaluated"""

    def test_trend_picks_branch(self):
        scorer = SignalScorer()
        assert scorer.select_branch(STRONG, BULL, 0.0) == Direction.LONG
        assert scorer.select_branch(STRONG, BEAR, 0.0) == Direction.SHORT

    def test_ranging_market_needs_book_bias(self):
        scorer = SignalScorer()
        assert scorer.select_branch(CHOP, FLAT, 0.16) == Direction.LONG
        assert scorer.select_branch(CHOP, FLAT, -0.16) == Direction.SHORT
        assert scorer.select_branch(CHOP, FLAT, 0.15) == Direction.NONE

    def test_trend_takes_precedence_over_bias(self):
        """Bullish trend stays long even with a strongly ask-heavy book"""
        assert SignalScorer().select_branch(CHOP, BULL, -0.5) == Direction.LONG

    def test_no_branch_is_choppy(self):
        card = SignalScorer().score(CHOP, FLAT, rsi=50.0, price=100.0, ema21=100.0, order_book_bias=0.0)

        assert card.direction == Direction.NONE
        assert card.score == 0
        assert card.blocking_reasons == ["Market structure undefined / Choppy"]
        assert card.confirmations == []


class TestLongBranch:
    """Long confluence"""

    def test_full_confluence(self):
        card = SignalScorer().score(STRONG, BULL, rsi=25.0, price=101.0, ema21=100.0, order_book_bias=0.1)

        assert card.direction == Direction.LONG
        assert card.score == 20 + 20 + 15 + 35
        assert card.confirmations == ["RSI Oversold", "Price above 15m EMA21", "Order Book Bid Support"]
        assert card.blocking_reasons == []

    def test_value_zone_without_book(self):
        card = SignalScorer().score(STRONG, BULL, rsi=55.0, price=101.0, ema21=100.0)

        assert card.direction == Direction.LONG
        assert card.score == 10 + 20 + 35
        assert "RSI in Value Zone" in card.confirmations

    def test_overbought_blocks(self):
        card = SignalScorer().score(STRONG, BULL, rsi=75.0, price=101.0, ema21=100.0, order_book_bias=0.1)

        assert card.direction == Direction.NONE
        assert card.blocking_reasons == ["RSI Overbought (Risk of pullback)"]
        # Partial confirmations are still reported, without the trend bonus
        assert card.score == 20 + 15

    def test_price_in_proximity_band_is_neutral(self):
        """Between EMA21 * 0.99 and EMA21 neither confirms nor blocks"""
        card = SignalScorer().score(STRONG, BULL, rsi=55.0, price=99.5, ema21=100.0)

        assert card.direction == Direction.LONG
        assert card.score == 10 + 35
        assert not any("EMA21" in reason for reason in card.confirmations)

    def test_lost_structure_blocks(self):
        card = SignalScorer().score(STRONG, BULL, rsi=55.0, price=98.0, ema21=100.0)
        assert "Price lost 15m EMA21 structure" in card.blocking_reasons
        assert card.direction == Direction.NONE

    def test_heavy_sell_walls_block(self):
        card = SignalScorer().score(STRONG, BULL, rsi=55.0, price=101.0, ema21=100.0, order_book_bias=-0.25)
        assert card.blocking_reasons == ["Heavy Sell Walls Overhead"]
        assert card.direction == Direction.NONE

    def test_timeframe_label(self):
        card = SignalScorer(entry_timeframe="5m").score(STRONG, BULL, rsi=55.0, price=101.0, ema21=100.0)
        assert "Price above 5m EMA21" in card.confirmations


class TestShortBranch:
    """Short confluence mirrors the long side"""

    def test_full_confluence(self):
        card = SignalScorer().score(STRONG, BEAR, rsi=75.0, price=99.0, ema21=100.0, order_book_bias=-0.1)

        assert card.direction == Direction.SHORT
        assert card.score == 90
        assert card.confirmations == ["RSI Overbought", "Price below 15m EMA21", "Order Book Ask Pressure"]

    def test_oversold_blocks(self):
        card = SignalScorer().score(STRONG, BEAR, rsi=25.0, price=99.0, ema21=100.0)
        assert card.blocking_reasons == ["RSI Oversold (Risk of bounce)"]

    def test_broken_structure_blocks(self):
        card = SignalScorer().score(STRONG, BEAR, rsi=50.0, price=101.5, ema21=100.0)
        assert card.blocking_reasons == ["Price broke 15m EMA21 structure"]

    def test_heavy_buy_walls_block(self):
        card = SignalScorer().score(STRONG, BEAR, rsi=50.0, price=99.0, ema21=100.0, order_book_bias=0.3)
        assert card.blocking_reasons == ["Heavy Buy Walls Below"]


class TestRiskTargetCalculator:
    """Stops, targets and risk:reward"""

    def test_long_structure_stop(self):
        """Swing low well below entry: structure stop (wider) wins"""
        candles = make_candles([100.0, 96.0, 98.0, 100.0], wick=0.0)
        targets = RiskTargetCalculator().calculate(Direction.LONG, 100.0, candles)

        assert targets.stop_loss == pytest.approx(96.0 * 0.998)
        risk = 100.0 - 96.0 * 0.998
        assert targets.take_profits == pytest.approx((100.0 + 1.5 * risk, 100.0 + 2.5 * risk, 100.0 + 4.0 * risk))

    def test_long_tight_structure_uses_minimum_stop(self):
        """Swing low just under entry: min() picks the 0.8% minimum stop"""
        candles = make_candles([99.9, 100.0, 100.0], wick=0.0)
        targets = RiskTargetCalculator().calculate(Direction.LONG, 100.0, candles)
        assert targets.stop_loss == pytest.approx(99.2)

    def test_long_structure_above_entry_uses_minimum_stop(self):
        candles = make_candles([105.0, 106.0], wick=0.0)
        targets = RiskTargetCalculator().calculate(Direction.LONG, 100.0, candles)
        assert targets.stop_loss == pytest.approx(99.2)

    def test_short_mirror(self):
        candles = make_candles([100.0, 104.0, 102.0, 100.0], wick=0.0)
        targets = RiskTargetCalculator().calculate(Direction.SHORT, 100.0, candles)

        assert targets.stop_loss == pytest.approx(104.0 * 1.002)
        assert targets.take_profits[0] > targets.take_profits[1] > targets.take_profits[2]
        assert all(tp < 100.0 for tp in targets.take_profits)

    def test_short_structure_below_entry_uses_minimum_stop(self):
        candles = make_candles([95.0, 94.0], wick=0.0)
        targets = RiskTargetCalculator().calculate(Direction.SHORT, 100.0, candles)
        assert targets.stop_loss == pytest.approx(100.8)

    @pytest.mark.parametrize("direction", [Direction.LONG, Direction.SHORT])
    def test_risk_reward_measured_to_second_target(self, direction):
        candles = make_candles([100.0, 97.0, 103.0, 100.0], wick=0.3)
        targets = RiskTargetCalculator().calculate(direction, 100.0, candles)

        expected = round(abs(targets.take_profits[1] - 100.0) / abs(100.0 - targets.stop_loss), 2)
        assert targets.risk_reward == expected == 2.5
        assert targets.risk == pytest.approx(abs(100.0 - targets.stop_loss))

    def test_only_last_lookback_bars_count(self):
        candles = make_candles([50.0] + [100.0] * 12, wick=0.0)
        targets = RiskTargetCalculator(swing_lookback=10).calculate(Direction.LONG, 100.0, candles)
        assert targets.stop_loss == pytest.approx(99.2)

    def test_none_direction_raises(self):
        with pytest.raises(ValueError):
            RiskTargetCalculator().calculate(Direction.NONE, 100.0, make_candles([100.0]))

    def test_non_positive_risk_raises(self):
        calculator = RiskTargetCalculator(min_sl_long=1.0, structure_sl_buffer_long=1.0)
        with pytest.raises(ArithmeticDegenerateError):
            calculator.calculate(Direction.LONG, 100.0, make_candles([100.0, 100.0], wick=0.0))
