"""
Signal Models
Enumerations and result records produced by the analysis engine
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Tuple


class MarketRegime(str, Enum):
    """Coarse trend-strength classification"""
    STRONG_TREND = "STRONG_TREND"
    NORMAL_TREND = "NORMAL_TREND"
    RANGE_CHOP = "RANGE_CHOP"


class TrendDirection(str, Enum):
    """Trend direction from the trend timeframe EMAs"""
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class Direction(str, Enum):
    """Trade direction"""
    LONG = "LONG"
    SHORT = "SHORT"
    NONE = "NONE"


class SignalStatus(str, Enum):
    """Final signal status"""
    ACTIVE = "ACTIVE"
    POTENTIAL = "POTENTIAL"
    NO_TRADE = "NO_TRADE"


@dataclass(frozen=True)
class RegimeReading:
    """Regime classification result"""
    regime: MarketRegime
    trend: TrendDirection
    ema_diff: float  # (ema9 - ema21) / ema21


@dataclass
class ScoreCard:
    """
    Confluence accumulator

    Collects confirmations (with points) and blocking reasons in the order
    the checks ran. Direction stays NONE until a branch passes clean.
    """
    direction: Direction = Direction.NONE
    score: int = 0
    confirmations: List[str] = field(default_factory=list)
    blocking_reasons: List[str] = field(default_factory=list)

    def confirm(self, reason: str, points: int = 0) -> None:
        self.confirmations.append(reason)
        self.score += points

    def block(self, reason: str) -> None:
        self.blocking_reasons.append(reason)

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocking_reasons)


@dataclass(frozen=True)
class RiskTargets:
    """Entry, stop and take-profit levels for a direction"""
    entry_price: float
    stop_loss: float
    take_profits: Tuple[float, float, float]  # TP1 conservative, TP2 main, TP3 runner
    risk_reward: float  # measured to TP2

    @property
    def risk(self) -> float:
        return abs(self.entry_price - self.stop_loss)


@dataclass(frozen=True)
class AnalysisResult:
    """
    Complete analysis output for one invocation

    Created fresh every run. When direction is NONE there are no trade
    levels: take_profits is empty, stop_loss and risk_reward are 0.
    """
    # Market context
    regime: MarketRegime
    trend: TrendDirection
    rsi: float
    ema9: float
    ema21: float
    order_book_bias: float

    # Signal
    status: SignalStatus
    direction: Direction
    confidence_score: int

    # Trade parameters
    price: float
    entry_price: float
    stop_loss: float
    take_profits: Tuple[float, ...]
    risk_reward: float

    # Reasoning
    confirmations: Tuple[str, ...]
    blocking_reasons: Tuple[str, ...]

    @property
    def is_actionable(self) -> bool:
        return self.status == SignalStatus.ACTIVE

    def to_dict(self) -> dict:
        """Plain dict with enum values as strings"""
        data = asdict(self)
        for key in ("regime", "trend", "status", "direction"):
            data[key] = data[key].value
        data["take_profits"] = list(self.take_profits)
        data["confirmations"] = list(self.confirmations)
        data["blocking_reasons"] = list(self.blocking_reasons)
        return data


@dataclass(frozen=True)
class SpoofAlert:
    """A large resting order that vanished inside the spoofing window"""
    price: float
    side: str  # "bid" or "ask"
    notional: float
    duration_ms: int
    detected_at_ms: int
    expires_at_ms: int
    message: str

    def is_active(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms
