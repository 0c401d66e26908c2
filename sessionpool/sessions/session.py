import asyncio
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Session:
    """
    One simulated user holding a subscription to its private channel.

    The registry owns the record and its cancel event. The worker only
    changes the status flags, and only through the registry setters.
    """

    id: str
    cancel: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    is_connected: bool = False
    is_subscribed: bool = False
    worker: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class SessionCounters:
    total: int = 0
    connected: int = 0
    subscribed: int = 0
