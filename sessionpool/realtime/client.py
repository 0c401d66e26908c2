import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from centrifuge import (
    Client,
    ClientEventHandler,
    ConnectedContext,
    ConnectingContext,
    DisconnectedContext,
    ErrorContext,
    PublicationContext,
    ServerPublicationContext,
    ServerSubscribedContext,
    ServerUnsubscribedContext,
    SubscribedContext,
    SubscribingContext,
    SubscriptionErrorContext,
    SubscriptionEventHandler,
    UnsubscribedContext,
)

from .events import (
    ConnectedEvent,
    ConnectingEvent,
    DisconnectedEvent,
    ErrorEvent,
    PublicationEvent,
    RealtimeEvent,
    ServerSubscribedEvent,
    ServerUnsubscribedEvent,
    SubscribedEvent,
    SubscribeErrorEvent,
    SubscribingEvent,
    UnsubscribedEvent,
)

logger = logging.getLogger(__name__)


EventCallback = Callable[[RealtimeEvent], Awaitable[None]]


class _ClientEvents(ClientEventHandler):
    """Connection level callbacks, including server-side subscriptions."""

    def __init__(self, emit: EventCallback):
        self._emit = emit

    async def on_connecting(self, ctx: ConnectingContext) -> None:
        await self._emit(ConnectingEvent(code=ctx.code, reason=ctx.reason))

    async def on_connected(self, ctx: ConnectedContext) -> None:
        await self._emit(ConnectedEvent(client_id=ctx.client))

    async def on_disconnected(self, ctx: DisconnectedContext) -> None:
        await self._emit(DisconnectedEvent(code=ctx.code, reason=ctx.reason))

    async def on_error(self, ctx: ErrorContext) -> None:
        await self._emit(ErrorEvent(message=str(ctx.error) or f"code {ctx.code}"))

    async def on_subscribed(self, ctx: ServerSubscribedContext) -> None:
        await self._emit(
            ServerSubscribedEvent(
                channel=ctx.channel,
                resubscribed=bool(ctx.was_recovering),
                recovered=bool(ctx.recovered),
            )
        )

    async def on_unsubscribed(self, ctx: ServerUnsubscribedContext) -> None:
        await self._emit(ServerUnsubscribedEvent(channel=ctx.channel))

    async def on_publication(self, ctx: ServerPublicationContext) -> None:
        await self._emit(PublicationEvent(channel=ctx.channel, data=ctx.pub.data))


class _SubscriptionEvents(SubscriptionEventHandler):
    """Callbacks of one client-side subscription."""

    def __init__(self, channel: str, emit: EventCallback):
        self.channel = channel
        self._emit = emit

    async def on_subscribing(self, ctx: SubscribingContext) -> None:
        await self._emit(
            SubscribingEvent(channel=self.channel, code=ctx.code, reason=ctx.reason)
        )

    async def on_subscribed(self, ctx: SubscribedContext) -> None:
        await self._emit(SubscribedEvent(channel=self.channel))

    async def on_unsubscribed(self, ctx: UnsubscribedContext) -> None:
        await self._emit(UnsubscribedEvent(channel=self.channel))

    async def on_error(self, ctx: SubscriptionErrorContext) -> None:
        await self._emit(
            SubscribeErrorEvent(channel=self.channel, code=ctx.code, message=str(ctx.error))
        )

    async def on_publication(self, ctx: PublicationContext) -> None:
        await self._emit(PublicationEvent(channel=self.channel, data=ctx.pub.data))


class RealtimeClient:
    """
    Adapter over the centrifuge client for one simulated user.

    The wire protocol, reconnect policy and disconnect codes are handled by
    ``centrifuge.Client``. This class only turns its callbacks into the
    event models of ``events`` and hands them to a single async callback.
    Exceptions raised by that callback are logged and never reach the
    centrifuge client.
    """

    def __init__(
        self,
        endpoint: str,
        on_event: EventCallback,
        headers: Optional[Dict[str, str]] = None,
        name: str = "sessionpool",
        client_class: Callable[..., Any] = Client,
    ):
        self.endpoint = endpoint
        self._on_event = on_event
        self._client = client_class(
            endpoint,
            events=_ClientEvents(self._emit),
            headers=headers or {},
            name=name,
        )
        self._subscriptions: List[Any] = []
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    def add_subscription(self, channel: str) -> None:
        """
        Register a channel. The centrifuge client resubscribes it after
        every reconnect.
        """
        if any(sub.channel == channel for sub in self._subscriptions):
            return
        sub = self._client.new_subscription(
            channel, events=_SubscriptionEvents(channel, self._emit)
        )
        self._subscriptions.append(sub)

    def start(self) -> None:
        """Connect and subscribe in the background."""
        if self._task is None and not self._closed:
            self._task = asyncio.create_task(self._connect(), name=f"realtime-{self.endpoint}")

    async def close(self) -> None:
        """
        Disconnect. Active subscriptions are reported as unsubscribed.
        """
        if self._closed:
            return
        self._closed = True

        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        await self._client.disconnect()

    async def _connect(self) -> None:
        await self._client.connect()
        for sub in self._subscriptions:
            await sub.subscribe()

    async def _emit(self, event: RealtimeEvent) -> None:
        try:
            await self._on_event(event)
        except Exception as e:
            logger.error(f"Event handler failed on {event.type.value}: {e}")
