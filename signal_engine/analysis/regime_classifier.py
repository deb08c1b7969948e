"""
Regime Classifier
Classifies trend strength and direction from trend-timeframe EMAs
"""

import math

from ..models.signal import MarketRegime, RegimeReading, TrendDirection
from .errors import ArithmeticDegenerateError


class RegimeClassifier:
    """
    Classify market regime from the fast/slow EMA spread

    ema_diff = (ema_fast - ema_slow) / ema_slow

    | |ema_diff|                  | regime       |
    |-----------------------------|--------------|
    | > strong threshold          | STRONG_TREND |
    | (normal, strong]            | NORMAL_TREND |
    | <= normal threshold         | RANGE_CHOP   |

    Stateless: no memory of the previous regime.
    """

    def __init__(
        self,
        strong_trend_threshold: float = 0.008,
        normal_trend_threshold: float = 0.003
    ):
        """
        Args:
            strong_trend_threshold: |diff| above this = strong trend
            normal_trend_threshold: |diff| above this = normal trend
        """
        self.strong_trend_threshold = strong_trend_threshold
        self.normal_trend_threshold = normal_trend_threshold

    def classify(self, ema_fast: float, ema_slow: float) -> RegimeReading:
        """
        Classify regime

        Args:
            ema_fast: Last EMA9 of the trend timeframe
            ema_slow: Last EMA21 of the trend timeframe

        Returns:
            RegimeReading with regime, trend and ema_diff

        Raises:
            ArithmeticDegenerateError: ema_slow is zero or inputs are not finite
        """
        if not (math.isfinite(ema_fast) and math.isfinite(ema_slow)):
            raise ArithmeticDegenerateError(
                f"Non-finite EMA values: fast={ema_fast}, slow={ema_slow}"
            )
        if ema_slow == 0:
            raise ArithmeticDegenerateError("Slow EMA is zero, cannot compute EMA spread")

        return self.classify_diff((ema_fast - ema_slow) / ema_slow)

    def classify_diff(self, ema_diff: float) -> RegimeReading:
        """
        Classify a precomputed EMA spread (fraction of price)

        A spread exactly at the normal threshold is RANGE_CHOP; exactly at the
        strong threshold is NORMAL_TREND.
        """
        abs_diff = abs(ema_diff)

        if abs_diff > self.strong_trend_threshold:
            regime = MarketRegime.STRONG_TREND
        elif abs_diff > self.normal_trend_threshold:
            regime = MarketRegime.NORMAL_TREND
        else:
            regime = MarketRegime.RANGE_CHOP

        if ema_diff > 0:
            trend = TrendDirection.BULLISH
        elif ema_diff < 0:
            trend = TrendDirection.BEARISH
        else:
            trend = TrendDirection.NEUTRAL

        return RegimeReading(regime=regime, trend=trend, ema_diff=ema_diff)
