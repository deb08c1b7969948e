"""
Risk Target Calculator
Derives stop-loss and take-profit levels from recent price structure
"""

from typing import Sequence, Tuple

from ..models.market import Candle
from ..models.signal import Direction, RiskTargets
from .errors import ArithmeticDegenerateError
from .indicators import IndicatorCalculator


class RiskTargetCalculator:
    """
    Stop-loss / take-profit calculator

    LONG:
        structure SL = swing low * 0.998
        minimum SL   = entry * 0.992
        SL = min(structure, minimum) if structure is below entry, else minimum
        TPs = entry + risk * (1.5, 2.5, 4.0)

    SHORT mirrors it with swing high, 1.002, 1.008 and max().

    Risk:reward is always measured to TP2 (the main target).
    """

    def __init__(
        self,
        swing_lookback: int = 10,
        structure_sl_buffer_long: float = 0.998,
        structure_sl_buffer_short: float = 1.002,
        min_sl_long: float = 0.992,
        min_sl_short: float = 1.008,
        take_profit_multiples: Tuple[float, float, float] = (1.5, 2.5, 4.0)
    ):
        self.swing_lookback = swing_lookback
        self.structure_sl_buffer_long = structure_sl_buffer_long
        self.structure_sl_buffer_short = structure_sl_buffer_short
        self.min_sl_long = min_sl_long
        self.min_sl_short = min_sl_short
        self.take_profit_multiples = tuple(take_profit_multiples)

    def long_stop(self, entry_price: float, swing_low: float) -> float:
        structure_sl = swing_low * self.structure_sl_buffer_long
        min_sl = entry_price * self.min_sl_long
        if structure_sl < entry_price:
            return min(structure_sl, min_sl)
        return min_sl

    def short_stop(self, entry_price: float, swing_high: float) -> float:
        structure_sl = swing_high * self.structure_sl_buffer_short
        min_sl = entry_price * self.min_sl_short
        if structure_sl > entry_price:
            return max(structure_sl, min_sl)
        return min_sl

    def calculate(
        self,
        direction: Direction,
        entry_price: float,
        candles: Sequence[Candle]
    ) -> RiskTargets:
        """
        Calculate trade levels

        Args:
            direction: LONG or SHORT
            entry_price: Planned entry (current price)
            candles: Entry timeframe candles; the last `swing_lookback` are used

        Returns:
            RiskTargets with stop, three targets and risk:reward

        Raises:
            ValueError: direction is NONE
            ArithmeticDegenerateError: computed risk is not positive
        """
        if direction == Direction.NONE:
            raise ValueError("Risk targets need a LONG or SHORT direction")

        swing_low, swing_high = IndicatorCalculator.swing_levels(candles, self.swing_lookback)

        if direction == Direction.LONG:
            stop_loss = self.long_stop(entry_price, swing_low)
            risk = entry_price - stop_loss
            sign = 1
        else:
            stop_loss = self.short_stop(entry_price, swing_high)
            risk = stop_loss - entry_price
            sign = -1

        if risk <= 0:
            raise ArithmeticDegenerateError(
                f"Non-positive risk for {direction.value}: entry={entry_price}, stop={stop_loss}"
            )

        take_profits = tuple(entry_price + sign * risk * multiple for multiple in self.take_profit_multiples)
        risk_reward = round(abs(take_profits[1] - entry_price) / abs(entry_price - stop_loss), 2)

        return RiskTargets(
            entry_price=entry_price,
            stop_loss=stop_loss,
            take_profits=take_profits,
            risk_reward=risk_reward
        )
