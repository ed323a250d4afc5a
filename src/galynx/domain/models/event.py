"""Event domain model"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

REALTIME_STATUS = "realtime:status"
REALTIME_EVENT = "realtime:event"
REALTIME_PREFIX = "realtime:"


class RealtimeStatus(Enum):
    """Connection status reported by the realtime loop

    - ONLINE: Stream established
    - RECONNECTING: Connect attempt in progress
    - OFFLINE: Loop terminated
    """

    ONLINE = "online"
    RECONNECTING = "reconnecting"
    OFFLINE = "offline"

    def to_payload(self) -> dict[str, str]:
        return {"status": self.value}


@dataclass
class Event:
    """Local event emitted to the frontend

    Attributes:
        name: Event name, e.g. "realtime:status"
        data: Event payload
        timestamp: When the event was created
    """

    name: str
    data: Any = None
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        if self.timestamp is None:
            self.timestamp = datetime.now()

    def __repr__(self) -> str:
        ts = self.timestamp.isoformat() if self.timestamp else "none"
        return f"Event(name={self.name}, timestamp={ts})"


def typed_event_name(event_type: str) -> str:
    """Event name for a frame carrying an event_type discriminator"""
    return f"{REALTIME_PREFIX}{event_type}"
