"""
Signal Scorer
Scores long/short confluence and collects confirming and blocking reasons

Branches:
- LONG:  trend BULLISH, or ranging market with bid-heavy book
- SHORT: trend BEARISH, or ranging market with ask-heavy book
- none:  structure undefined / choppy
"""

import logging

from ..models.signal import Direction, MarketRegime, ScoreCard, TrendDirection

logger = logging.getLogger(__name__)


class SignalScorer:
    """
    Confluence scorer

    Score components (each independent, max raw total 90):
    - RSI at an extreme in the trade's favour: +20
    - RSI in value zone: +10
    - Price on the right side of entry EMA21: +20
    - Order book pressure in the trade's favour: +15
    - Branch passed with no blocking reason: +35 (base trend bonus)

    The score is an ordinal confluence count, not a probability.
    """

    RSI_EXTREME_POINTS = 20
    RSI_VALUE_ZONE_POINTS = 10
    STRUCTURE_POINTS = 20
    ORDER_BOOK_POINTS = 15
    BASE_TREND_POINTS = 35

    def __init__(
        self,
        rsi_oversold: float = 30.0,
        rsi_overbought: float = 70.0,
        range_entry_bias: float = 0.15,
        bias_confirm_threshold: float = 0.05,
        bias_block_threshold: float = 0.2,
        ema_proximity_lower: float = 0.99,
        ema_proximity_upper: float = 1.01,
        entry_timeframe: str = "15m"
    ):
        """
        Initialize scorer with thresholds

        Args:
            rsi_oversold: RSI below this is oversold
            rsi_overbought: RSI above this is overbought
            range_entry_bias: |bias| needed to take a side in RANGE_CHOP
            bias_confirm_threshold: |bias| in the trade's favour that confirms
            bias_block_threshold: |bias| against the trade that blocks
            ema_proximity_lower: Long blocked when price < EMA21 * this
            ema_proximity_upper: Short blocked when price > EMA21 * this
            entry_timeframe: Label used in structure reasons
        """
        self.rsi_oversold = rsi_oversold
        self.rsi_overbought = rsi_overbought
        self.range_entry_bias = range_entry_bias
        self.bias_confirm_threshold = bias_confirm_threshold
        self.bias_block_threshold = bias_block_threshold
        self.ema_proximity_lower = ema_proximity_lower
        self.ema_proximity_upper = ema_proximity_upper
        self.entry_timeframe = entry_timeframe

    def select_branch(
        self,
        regime: MarketRegime,
        trend: TrendDirection,
        order_book_bias: float
    ) -> Direction:
        """
        Pick the branch to evaluate

        Returns:
            LONG or SHORT branch, NONE when structure is undefined
        """
        ranging = regime == MarketRegime.RANGE_CHOP

        if trend == TrendDirection.BULLISH or (ranging and order_book_bias > self.range_entry_bias):
            return Direction.LONG
        if trend == TrendDirection.BEARISH or (ranging and order_book_bias < -self.range_entry_bias):
            return Direction.SHORT
        return Direction.NONE

    def score_long(self, card: ScoreCard, rsi: float, price: float, ema21: float, order_book_bias: float) -> None:
        """Evaluate long confluence into card"""
        if rsi < self.rsi_oversold:
            card.confirm("RSI Oversold", self.RSI_EXTREME_POINTS)
        elif rsi > self.rsi_overbought:
            card.block("RSI Overbought (Risk of pullback)")
        else:
            card.confirm("RSI in Value Zone", self.RSI_VALUE_ZONE_POINTS)

        if price > ema21:
            card.confirm(f"Price above {self.entry_timeframe} EMA21", self.STRUCTURE_POINTS)
        elif price < ema21 * self.ema_proximity_lower:
            card.block(f"Price lost {self.entry_timeframe} EMA21 structure")

        if order_book_bias > self.bias_confirm_threshold:
            card.confirm("Order Book Bid Support", self.ORDER_BOOK_POINTS)
        elif order_book_bias < -self.bias_block_threshold:
            card.block("Heavy Sell Walls Overhead")

    def score_short(self, card: ScoreCard, rsi: float, price: float, ema21: float, order_book_bias: float) -> None:
        """Evaluate short confluence into card"""
        if rsi > self.rsi_overbought:
            card.confirm("RSI Overbought", self.RSI_EXTREME_POINTS)
        elif rsi < self.rsi_oversold:
            card.block("RSI Oversold (Risk of bounce)")
        else:
            card.confirm("RSI in Value Zone", self.RSI_VALUE_ZONE_POINTS)

        if price < ema21:
            card.confirm(f"Price below {self.entry_timeframe} EMA21", self.STRUCTURE_POINTS)
        elif price > ema21 * self.ema_proximity_upper:
            card.block(f"Price broke {self.entry_timeframe} EMA21 structure")

        if order_book_bias < -self.bias_confirm_threshold:
            card.confirm("Order Book Ask Pressure", self.ORDER_BOOK_POINTS)
        elif order_book_bias > self.bias_block_threshold:
            card.block("Heavy Buy Walls Below")

    def score(
        self,
        regime: MarketRegime,
        trend: TrendDirection,
        rsi: float,
        price: float,
        ema21: float,
        order_book_bias: float = 0.0
    ) -> ScoreCard:
        """
        Score the current setup

        Args:
            regime: Trend timeframe regime
            trend: Trend timeframe direction
            rsi: Entry timeframe RSI (last value)
            price: Current price (last entry close)
            ema21: Entry timeframe EMA21 (last value)
            order_book_bias: Liquidity bias in [-1, 1]

        Returns:
            ScoreCard with direction, raw score and reasons. Partial
            confirmations are kept even when a block leaves direction NONE.
        """
        card = ScoreCard()
        branch = self.select_branch(regime, trend, order_book_bias)

        if branch == Direction.LONG:
            self.score_long(card, rsi, price, ema21, order_book_bias)
        elif branch == Direction.SHORT:
            self.score_short(card, rsi, price, ema21, order_book_bias)
        else:
            card.block("Market structure undefined / Choppy")
            return card

        if not card.is_blocked:
            card.direction = branch
            card.score += self.BASE_TREND_POINTS

        logger.debug(
            f"Scored {branch.value} branch: direction={card.direction.value} "
            f"score={card.score} blocks={len(card.blocking_reasons)}"
        )
        return card
