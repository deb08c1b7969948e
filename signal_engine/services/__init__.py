"""
Polling Services
"""

from .analysis_service import AnalysisService
from .orderbook_monitor import OrderBookMonitor

__all__ = ["AnalysisService", "OrderBookMonitor"]
