"""
Indicator Calculator
Stateless technical indicators over candle sequences
"""

from typing import List, Sequence, Tuple

from ..models.market import Candle
from .errors import InsufficientDataError


class IndicatorCalculator:
    """
    Calculate technical indicators

    Indicators:
    1. EMA (Exponential Moving Average)
    2. RSI (Relative Strength Index, Wilder smoothing)
    3. Swing high/low over a lookback window
    """

    @staticmethod
    def ema(candles: Sequence[Candle], period: int) -> List[float]:
        """
        Calculate EMA of closes

        Seed: ema[0] = close[0]
        Recurrence: ema[i] = (close[i] - ema[i-1]) * k + ema[i-1], k = 2 / (period + 1)

        There is no warm-up beyond the seed, so early values lean towards the
        first close. Only the last value of a long series is ever consumed.

        Args:
            candles: Candles in ascending time order
            period: EMA period

        Returns:
            EMA values, same length as candles

        Raises:
            InsufficientDataError: No candles
        """
        if period < 1:
            raise ValueError(f"EMA period must be >= 1, got {period}")
        if not candles:
            raise InsufficientDataError("EMA needs at least 1 candle", required=1, available=0)

        k = 2 / (period + 1)
        value = candles[0].close
        values = [value]

        for candle in candles[1:]:
            value = (candle.close - value) * k + value
            values.append(value)

        return values

    @staticmethod
    def rsi(candles: Sequence[Candle], period: int = 14) -> List[float]:
        """
        Calculate RSI with Wilder smoothing

        The first `period` price changes seed the average gain/loss; every
        later change is smoothed in:
            avg = (avg * (period - 1) + current) / period

        Args:
            candles: Candles in ascending time order
            period: RSI period (default: 14)

        Returns:
            RSI values, length len(candles) - period

        Raises:
            InsufficientDataError: len(candles) <= period
        """
        if period < 1:
            raise ValueError(f"RSI period must be >= 1, got {period}")
        if len(candles) <= period:
            raise InsufficientDataError(
                f"RSI({period}) needs more than {period} candles, got {len(candles)}",
                required=period + 1,
                available=len(candles)
            )

        gains = 0.0
        losses = 0.0
        for i in range(1, period + 1):
            change = candles[i].close - candles[i - 1].close
            if change > 0:
                gains += change
            else:
                losses -= change

        avg_gain = gains / period
        avg_loss = losses / period
        values = [IndicatorCalculator.rsi_from_averages(avg_gain, avg_loss)]

        for i in range(period + 1, len(candles)):
            change = candles[i].close - candles[i - 1].close
            gain = change if change > 0 else 0.0
            loss = -change if change < 0 else 0.0

            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
            values.append(IndicatorCalculator.rsi_from_averages(avg_gain, avg_loss))

        return values

    @staticmethod
    def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
        """
        RSI = 100 - 100 / (1 + avg_gain / avg_loss)

        With no losses in the window the ratio is undefined: RSI saturates at
        100 when there were gains, and a completely flat window is neutral (50).
        """
        if avg_loss == 0:
            return 100.0 if avg_gain > 0 else 50.0

        rs = avg_gain / avg_loss
        return 100 - (100 / (1 + rs))

    @staticmethod
    def swing_levels(candles: Sequence[Candle], lookback: int = 10) -> Tuple[float, float]:
        """
        Swing low and swing high of the last `lookback` candles

        Args:
            candles: Candles in ascending time order
            lookback: Number of most recent candles to scan

        Returns:
            (swing_low, swing_high) tuple

        Raises:
            InsufficientDataError: No candles
        """
        if not candles:
            raise InsufficientDataError("Swing levels need at least 1 candle", required=1, available=0)

        window = candles[-lookback:]
        swing_low = min(c.low for c in window)
        swing_high = max(c.high for c in window)
        return swing_low, swing_high

    @staticmethod
    def last_ema(candles: Sequence[Candle], period: int) -> float:
        """Most recent EMA value"""
        return IndicatorCalculator.ema(candles, period)[-1]

    @staticmethod
    def last_rsi(candles: Sequence[Candle], period: int = 14) -> float:
        """Most recent RSI value"""
        return IndicatorCalculator.rsi(candles, period)[-1]


# Module-level shortcuts
ema = IndicatorCalculator.ema
rsi = IndicatorCalculator.rsi
swing_levels = IndicatorCalculator.swing_levels
