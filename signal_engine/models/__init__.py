"""
Domain Models
Market data inputs and analysis outputs
"""

from .market import Candle, OrderBookEntry, OrderBookState
from .signal import (
    MarketRegime,
    TrendDirection,
    Direction,
    SignalStatus,
    RegimeReading,
    ScoreCard,
    RiskTargets,
    AnalysisResult,
    SpoofAlert,
)

__all__ = [
    "Candle",
    "OrderBookEntry",
    "OrderBookState",
    "MarketRegime",
    "TrendDirection",
    "Direction",
    "SignalStatus",
    "RegimeReading",
    "ScoreCard",
    "RiskTargets",
    "AnalysisResult",
    "SpoofAlert",
]
