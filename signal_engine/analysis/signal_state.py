"""
Signal State Tracker
Remembers the last status per symbol and reports fresh activations
"""

import logging
from typing import Optional

from ..models.signal import AnalysisResult, SignalStatus

logger = logging.getLogger(__name__)


class SignalStateTracker:
    """
    Previous-status memory for one symbol

    A signal "activates" when a result turns ACTIVE while the previous
    status was anything else. Staying ACTIVE across runs does not re-fire.
    """

    def __init__(self, symbol: str = ""):
        self.symbol = symbol
        self.previous_status: SignalStatus = SignalStatus.NO_TRADE
        self.last_result: Optional[AnalysisResult] = None

    def update(self, result: AnalysisResult) -> bool:
        """
        Record a new result

        Returns:
            True if this result is a fresh activation
        """
        activated = (
            result.status == SignalStatus.ACTIVE
            and self.previous_status != SignalStatus.ACTIVE
        )

        if result.status != self.previous_status:
            logger.debug(f"{self.symbol} status {self.previous_status.value} -> {result.status.value}")

        self.previous_status = result.status
        self.last_result = result
        return activated

    def reset(self) -> None:
        self.previous_status = SignalStatus.NO_TRADE
        self.last_result = None
