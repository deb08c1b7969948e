"""
Market Analyzer
Runs the full analysis pipeline for one instrument

Pipeline:
1. Trend timeframe EMA9 / EMA21 -> regime and trend
2. Entry timeframe RSI and EMA21
3. Order book bias
4. Confluence scoring (long / short branch)
5. Stop-loss and take-profit levels (when a direction exists)
6. Status (ACTIVE / POTENTIAL / NO_TRADE)

The analyzer is a pure function of its inputs: candles and an optional
order book snapshot in, a fresh AnalysisResult out.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..models.market import Candle, OrderBookState
from ..models.signal import AnalysisResult, Direction, ScoreCard, SignalStatus
from .errors import ArithmeticDegenerateError, InsufficientDataError
from .indicators import IndicatorCalculator
from .orderbook_analyzer import OrderBookAnalyzer
from .regime_classifier import RegimeClassifier
from .risk_calculator import RiskTargetCalculator
from .signal_scorer import SignalScorer

logger = logging.getLogger(__name__)


class MarketAnalyzer:
    """
    Analysis orchestrator

    Holds the configured components; keeps no state between calls.
    """

    def __init__(
        self,
        regime_classifier: Optional[RegimeClassifier] = None,
        scorer: Optional[SignalScorer] = None,
        risk_calculator: Optional[RiskTargetCalculator] = None,
        orderbook_analyzer: Optional[OrderBookAnalyzer] = None,
        ema_fast_period: int = 9,
        ema_slow_period: int = 21,
        rsi_period: int = 14,
        min_candles: int = 50,
        active_confidence_threshold: int = 65,
        potential_confidence_threshold: int = 40
    ):
        """
        Initialize analyzer

        Args:
            regime_classifier: Regime classifier (default thresholds if None)
            scorer: Signal scorer (default thresholds if None)
            risk_calculator: Risk target calculator (default buffers if None)
            orderbook_analyzer: Order book analyzer
            ema_fast_period: Fast EMA period on the trend timeframe
            ema_slow_period: Slow EMA period on both timeframes
            rsi_period: RSI period on the entry timeframe
            min_candles: Bars required on each timeframe
            active_confidence_threshold: Score above this is ACTIVE
            potential_confidence_threshold: Score above this is POTENTIAL
        """
        self.regime_classifier = regime_classifier or RegimeClassifier()
        self.scorer = scorer or SignalScorer()
        self.risk_calculator = risk_calculator or RiskTargetCalculator()
        self.orderbook_analyzer = orderbook_analyzer or OrderBookAnalyzer()

        self.ema_fast_period = ema_fast_period
        self.ema_slow_period = ema_slow_period
        self.rsi_period = rsi_period
        self.min_candles = min_candles
        self.active_confidence_threshold = active_confidence_threshold
        self.potential_confidence_threshold = potential_confidence_threshold

    @classmethod
    def from_settings(cls, settings) -> "MarketAnalyzer":
        """Build an analyzer with every tunable taken from Settings"""
        return cls(
            regime_classifier=RegimeClassifier(
                strong_trend_threshold=settings.strong_trend_threshold,
                normal_trend_threshold=settings.normal_trend_threshold
            ),
            scorer=SignalScorer(
                rsi_oversold=settings.rsi_oversold,
                rsi_overbought=settings.rsi_overbought,
                range_entry_bias=settings.range_entry_bias,
                bias_confirm_threshold=settings.bias_confirm_threshold,
                bias_block_threshold=settings.bias_block_threshold,
                ema_proximity_lower=settings.ema_proximity_lower,
                ema_proximity_upper=settings.ema_proximity_upper,
                entry_timeframe=settings.entry_timeframe
            ),
            risk_calculator=RiskTargetCalculator(
                swing_lookback=settings.swing_lookback,
                structure_sl_buffer_long=settings.structure_sl_buffer_long,
                structure_sl_buffer_short=settings.structure_sl_buffer_short,
                min_sl_long=settings.min_sl_long,
                min_sl_short=settings.min_sl_short,
                take_profit_multiples=settings.take_profit_multiples
            ),
            ema_fast_period=settings.ema_fast_period,
            ema_slow_period=settings.ema_slow_period,
            rsi_period=settings.rsi_period,
            min_candles=settings.min_candles,
            active_confidence_threshold=settings.active_confidence_threshold,
            potential_confidence_threshold=settings.potential_confidence_threshold
        )

    def _check_length(self, candles: Sequence[Candle], label: str) -> None:
        if len(candles) < self.min_candles:
            raise InsufficientDataError(
                f"{label} timeframe has {len(candles)} candles, need {self.min_candles}",
                required=self.min_candles,
                available=len(candles)
            )

    def resolve_status(self, card: ScoreCard) -> Tuple[SignalStatus, int, List[str]]:
        """
        Final status from a score card

        Returns:
            (status, clamped score, blocking reasons incl. status notes)
        """
        score = max(0, min(100, card.score))
        blocking = list(card.blocking_reasons)

        if blocking:
            status = SignalStatus.NO_TRADE
        elif score > self.active_confidence_threshold:
            status = SignalStatus.ACTIVE
        elif score > self.potential_confidence_threshold:
            status = SignalStatus.POTENTIAL
            blocking.append(f"Confidence Score too low (< {self.active_confidence_threshold}%)")
        else:
            status = SignalStatus.NO_TRADE
            blocking.append("Insufficient technical confluence")

        return status, score, blocking

    def analyze(
        self,
        entry_candles: Sequence[Candle],
        trend_candles: Sequence[Candle],
        order_book: Optional[OrderBookState] = None
    ) -> AnalysisResult:
        """
        Analyze one instrument

        Args:
            entry_candles: Entry timeframe candles (e.g. 15m), ascending
            trend_candles: Trend timeframe candles (e.g. 1h), ascending
            order_book: Latest order book snapshot, or None

        Returns:
            AnalysisResult

        Raises:
            InsufficientDataError: Either series is shorter than min_candles
            ArithmeticDegenerateError: Slow EMA is zero or an indicator is non-finite
        """
        self._check_length(entry_candles, "Entry")
        self._check_length(trend_candles, "Trend")

        # Trend context
        ema9 = IndicatorCalculator.last_ema(trend_candles, self.ema_fast_period)
        ema21 = IndicatorCalculator.last_ema(trend_candles, self.ema_slow_period)
        reading = self.regime_classifier.classify(ema9, ema21)

        # Entry timing
        rsi = IndicatorCalculator.last_rsi(entry_candles, self.rsi_period)
        entry_ema21 = IndicatorCalculator.last_ema(entry_candles, self.ema_slow_period)
        price = entry_candles[-1].close
        if not all(math.isfinite(v) for v in (rsi, entry_ema21, price)):
            raise ArithmeticDegenerateError(
                f"Entry timeframe produced a non-finite value (rsi={rsi}, ema21={entry_ema21}, price={price})"
            )

        bias = self.orderbook_analyzer.calculate_bias(order_book)

        card = self.scorer.score(
            regime=reading.regime,
            trend=reading.trend,
            rsi=rsi,
            price=price,
            ema21=entry_ema21,
            order_book_bias=bias
        )

        stop_loss = 0.0
        take_profits: Tuple[float, ...] = ()
        risk_reward = 0.0
        if card.direction != Direction.NONE:
            targets = self.risk_calculator.calculate(card.direction, price, entry_candles)
            stop_loss = targets.stop_loss
            take_profits = targets.take_profits
            risk_reward = targets.risk_reward

        status, score, blocking = self.resolve_status(card)

        result = AnalysisResult(
            regime=reading.regime,
            trend=reading.trend,
            rsi=rsi,
            ema9=ema9,
            ema21=ema21,
            order_book_bias=round(bias, 2),
            status=status,
            direction=card.direction,
            confidence_score=score,
            price=price,
            entry_price=price,
            stop_loss=stop_loss,
            take_profits=take_profits,
            risk_reward=risk_reward,
            confirmations=tuple(card.confirmations),
            blocking_reasons=tuple(blocking)
        )

        logger.debug(
            f"Analysis: {result.regime.value}/{result.trend.value} rsi={rsi:.1f} "
            f"bias={bias:+.3f} -> {status.value} {card.direction.value} ({score})"
        )
        return result


if __name__ == "__main__":
    """
    Analyze a synthetic uptrend
    Run: python -m signal_engine.analysis.market_analyzer
    """
    entry = []
    close = 100.0
    for i in range(60):
        close += 1.5 if i % 2 == 0 else -1.0
        entry.append(Candle(time=i * 900, open=close - 0.5, high=close + 0.5, low=close - 1.0, close=close, volume=10.0))
    trend = [
        Candle(time=i * 3600, open=99.5 + i, high=101.0 + i, low=99.0 + i, close=100.0 + i, volume=10.0)
        for i in range(60)
    ]
    book = OrderBookState.from_levels(bids=[(entry[-1].close - 0.1, 55.0)], asks=[(entry[-1].close + 0.1, 45.0)])

    result = MarketAnalyzer().analyze(entry, trend, book)

    print("=" * 70)
    print("Market Analyzer Demo")
    print("=" * 70)
    for key, value in result.to_dict().items():
        print(f"{key:>18}: {value}")
