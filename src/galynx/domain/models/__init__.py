"""Domain models"""

from .event import (
    REALTIME_EVENT,
    REALTIME_STATUS,
    Event,
    RealtimeStatus,
    typed_event_name,
)

__all__ = [
    "Event",
    "RealtimeStatus",
    "REALTIME_EVENT",
    "REALTIME_STATUS",
    "typed_event_name",
]
