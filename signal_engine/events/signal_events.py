"""
Signal Events
Analysis results, signal activations and spoof alerts
"""

from typing import List, Literal, Optional

from pydantic import Field

from ..models.signal import AnalysisResult, SpoofAlert
from .base import BaseEvent


class AnalysisCompletedEvent(BaseEvent):
    """
    Analysis Completed Event
    Emitted after every successful analysis run
    """

    event_type: Literal["analysis_completed"] = "analysis_completed"

    # Market context
    regime: str
    trend: str
    rsi: float
    ema9: float
    ema21: float
    order_book_bias: float

    # Signal
    status: str
    direction: str
    confidence_score: int = Field(ge=0, le=100)

    # Trade parameters
    price: float
    entry_price: float
    stop_loss: float = 0.0
    take_profits: List[float] = Field(default_factory=list)
    risk_reward: float = 0.0

    # Reasoning
    confirmations: List[str] = Field(default_factory=list)
    blocking_reasons: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, symbol: str, result: AnalysisResult, **extra) -> "AnalysisCompletedEvent":
        return cls(symbol=symbol, **result.to_dict(), **extra)


class SignalActivatedEvent(AnalysisCompletedEvent):
    """
    Signal Activated Event
    Emitted when a symbol's status turns ACTIVE from any other status
    """

    event_type: Literal["signal_activated"] = "signal_activated"

    previous_status: Optional[str] = None


class SpoofAlertEvent(BaseEvent):
    """Spoof Alert Event"""

    event_type: Literal["spoof_alert"] = "spoof_alert"

    price: float
    side: str
    notional: float
    duration_ms: int
    detected_at_ms: int
    expires_at_ms: int
    message: str

    @classmethod
    def from_alert(cls, symbol: str, alert: SpoofAlert) -> "SpoofAlertEvent":
        return cls(
            symbol=symbol,
            price=alert.price,
            side=alert.side,
            notional=alert.notional,
            duration_ms=alert.duration_ms,
            detected_at_ms=alert.detected_at_ms,
            expires_at_ms=alert.expires_at_ms,
            message=alert.message
        )
