from .client import RealtimeClient
from .events import EventType, RealtimeEvent

__all__ = ["RealtimeClient", "EventType", "RealtimeEvent"]
