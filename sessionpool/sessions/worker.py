import asyncio
from typing import TYPE_CHECKING, Any, Callable, Dict
import logging

from ..realtime.client import RealtimeClient
from ..realtime.events import EventType, RealtimeEvent
from ..utils.cookies import cookie_header
from ..utils.urls import private_channel, realtime_endpoint

if TYPE_CHECKING:
    from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionWorker:
    """
    Owns the broker connection of one session.

    The worker connects, subscribes to the session's private channel and
    mirrors connection/subscription events into the registry. Transport
    and subscription errors only flip status flags; reconnecting is left
    to the client. The only way out is the cancel event.
    """

    def __init__(
        self,
        session_id: str,
        broker_url: str,
        cookies: Dict[str, str],
        registry: "SessionRegistry",
        cancel: asyncio.Event,
        client_factory: Callable[..., Any] = RealtimeClient,
    ):
        self.session_id = session_id
        self.broker_url = broker_url
        self.cookies = cookies
        self.registry = registry
        self.cancel = cancel
        self._client_factory = client_factory

    @property
    def channel(self) -> str:
        return private_channel(self.session_id)

    async def run(self) -> None:
        if self.cancel.is_set():
            return

        try:
            endpoint = realtime_endpoint(self.broker_url)
            headers = {"Cookie": cookie_header(self.cookies)}
        except ValueError as e:
            logger.error(f"[User {self.session_id}] Can't start session: {e}")
            return

        client = self._client_factory(endpoint, on_event=self.handle_event, headers=headers)
        client.add_subscription(self.channel)
        client.start()

        try:
            await self.cancel.wait()
        finally:
            await client.close()
            logger.info(f"[User {self.session_id}] exit")

    async def handle_event(self, event: RealtimeEvent) -> None:
        """
        Single dispatch point for every client event.
        """
        user = self.session_id

        if event.type == EventType.CONNECTING:
            logger.info(f"[User {user}] Connecting reason: {event.reason}")
            self.registry.set_connected(user, False)
        elif event.type == EventType.CONNECTED:
            logger.info(f"[User {user}] Connected")
            self.registry.set_connected(user, True)
        elif event.type == EventType.ERROR:
            logger.warning(f"[User {user}] Connection error message: {event.message}")
            self.registry.set_connected(user, False)
        elif event.type == EventType.DISCONNECTED:
            logger.info(f"[User {user}] Disconnected reason: {event.reason}")
            self.registry.set_connected(user, False)
        elif event.type == EventType.SUBSCRIBING:
            logger.info(f"[User {user}] Subscribing to private channel {event.channel}: {event.reason}")
            self.registry.set_subscribed(user, False)
        elif event.type == EventType.SUBSCRIBED:
            logger.info(f"[User {user}] Subscribed to private channel {event.channel}")
            self.registry.set_subscribed(user, True)
        elif event.type == EventType.SUBSCRIBE_ERROR:
            logger.warning(
                f"[User {user}] Error subscribing to private channel {event.channel}: "
                f"{event.code} {event.message}"
            )
            self.registry.set_subscribed(user, False)
        elif event.type == EventType.UNSUBSCRIBED:
            logger.info(f"[User {user}] Unsubscribed from private channel {event.channel}")
            self.registry.set_subscribed(user, False)
        elif event.type == EventType.PUBLICATION:
            logger.info(
                f"[User {user}] Received message from channel {event.channel}: {event.data}"
            )
        elif event.type == EventType.SERVER_SUBSCRIBED:
            logger.info(
                f"[User {user}] Subscribe to server-side channel {event.channel}: "
                f"(resubscribe: {event.resubscribed}, recovered: {event.recovered})"
            )
        elif event.type == EventType.SERVER_UNSUBSCRIBED:
            logger.info(f"[User {user}] Unsubscribe from server-side channel {event.channel}")
