"""
Base Event Class
All events inherit from this base class
"""

from datetime import datetime
from uuid import uuid4, UUID
from typing import Any, Dict

from pydantic import BaseModel, Field

from ..utils.timeutils import now_utc


class BaseEvent(BaseModel):
    """
    Base class for all events in the system

    All events have:
    - Unique event_id
    - Timestamp (UTC)
    - Event type identifier
    - Symbol the event refers to
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )

    timestamp: datetime = Field(
        default_factory=now_utc,
        description="Event timestamp in UTC"
    )

    event_type: str = Field(
        default="base.event",
        description="Event type identifier"
    )

    symbol: str = Field(
        default="",
        description="Instrument symbol, e.g. BTCUSDT"
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a JSON-compatible dictionary"""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Convert event to JSON string"""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, json_str: str) -> "BaseEvent":
        """
        Create event from JSON string

        Args:
            json_str: JSON string as stored in the stream

        Returns:
            Event instance
        """
        return cls.model_validate_json(json_str)

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.event_id} type={self.event_type} symbol={self.symbol}>"
