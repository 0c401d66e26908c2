from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, Field


class EventType(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    SUBSCRIBING = "subscribing"
    SUBSCRIBED = "subscribed"
    SUBSCRIBE_ERROR = "subscribe_error"
    UNSUBSCRIBED = "unsubscribed"
    PUBLICATION = "publication"
    SERVER_SUBSCRIBED = "server_subscribed"
    SERVER_UNSUBSCRIBED = "server_unsubscribed"


class ConnectingEvent(BaseModel):
    type: EventType = Field(default=EventType.CONNECTING)
    code: int = 0
    reason: str = ""


class ConnectedEvent(BaseModel):
    type: EventType = Field(default=EventType.CONNECTED)
    client_id: Optional[str] = None


class DisconnectedEvent(BaseModel):
    type: EventType = Field(default=EventType.DISCONNECTED)
    code: int = 0
    reason: str = ""


class ErrorEvent(BaseModel):
    type: EventType = Field(default=EventType.ERROR)
    message: str


class SubscribingEvent(BaseModel):
    type: EventType = Field(default=EventType.SUBSCRIBING)
    channel: str
    code: int = 0
    reason: str = ""


class SubscribedEvent(BaseModel):
    type: EventType = Field(default=EventType.SUBSCRIBED)
    channel: str


class SubscribeErrorEvent(BaseModel):
    type: EventType = Field(default=EventType.SUBSCRIBE_ERROR)
    channel: str
    code: int = 0
    message: str = ""


class UnsubscribedEvent(BaseModel):
    type: EventType = Field(default=EventType.UNSUBSCRIBED)
    channel: str


class PublicationEvent(BaseModel):
    type: EventType = Field(default=EventType.PUBLICATION)
    channel: str
    data: Any = None


class ServerSubscribedEvent(BaseModel):
    type: EventType = Field(default=EventType.SERVER_SUBSCRIBED)
    channel: str
    resubscribed: bool = False
    recovered: bool = False


class ServerUnsubscribedEvent(BaseModel):
    type: EventType = Field(default=EventType.SERVER_UNSUBSCRIBED)
    channel: str


RealtimeEvent = Union[
    ConnectingEvent,
    ConnectedEvent,
    DisconnectedEvent,
    ErrorEvent,
    SubscribingEvent,
    SubscribedEvent,
    SubscribeErrorEvent,
    UnsubscribedEvent,
    PublicationEvent,
    ServerSubscribedEvent,
    ServerUnsubscribedEvent,
]
