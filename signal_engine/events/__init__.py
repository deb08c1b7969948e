"""
Event Definitions
All event types used in the system
"""

from .base import BaseEvent
from .signal_events import (
    AnalysisCompletedEvent,
    SignalActivatedEvent,
    SpoofAlertEvent
)

__all__ = [
    "BaseEvent",
    "AnalysisCompletedEvent",
    "SignalActivatedEvent",
    "SpoofAlertEvent",
]
