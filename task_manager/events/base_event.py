"""
Base event implementation for the event system.
Concrete events are dataclasses; correlation ID and timestamp are attached
after the generated __init__ runs so subclasses may declare required fields.
"""

import uuid
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Dict

from ..interfaces.event_interface import IEvent


class BaseEvent(IEvent):
    """Base implementation for all events."""

    def __post_init__(self) -> None:
        self.correlation_id = str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    @property
    def event_type(self) -> str:
        """Event type identifier based on class name."""
        return self.__class__.__name__

    @property
    def data(self) -> Dict[str, Any]:
        """Declared dataclass fields, excluding correlation ID and timestamp."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data
        }

    def __str__(self) -> str:
        return f"{self.event_type}(correlation_id={self.correlation_id})"
