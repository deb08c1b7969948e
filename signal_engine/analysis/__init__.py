"""
Analysis Engine
Indicators, regime detection, signal scoring and spoof detection
"""

from .errors import (
    AnalysisError,
    InsufficientDataError,
    MalformedSnapshotError,
    ArithmeticDegenerateError,
)
from .indicators import IndicatorCalculator
from .orderbook_analyzer import OrderBookAnalyzer, Wall
from .regime_classifier import RegimeClassifier
from .signal_scorer import SignalScorer
from .risk_calculator import RiskTargetCalculator
from .market_analyzer import MarketAnalyzer
from .spoof_detector import SpoofDetector, WallTracker
from .signal_state import SignalStateTracker

__all__ = [
    "AnalysisError",
    "InsufficientDataError",
    "MalformedSnapshotError",
    "ArithmeticDegenerateError",
    "IndicatorCalculator",
    "OrderBookAnalyzer",
    "Wall",
    "RegimeClassifier",
    "SignalScorer",
    "RiskTargetCalculator",
    "MarketAnalyzer",
    "SpoofDetector",
    "WallTracker",
    "SignalStateTracker",
]
