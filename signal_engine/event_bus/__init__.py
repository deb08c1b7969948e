"""
Event Bus
Redis Streams transport for engine events
"""

from .bus import EventBus

__all__ = ["EventBus"]
