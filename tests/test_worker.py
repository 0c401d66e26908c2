"""Tests for the session worker.

Tests cover:
- Client setup (endpoint, cookies, private channel)
- Event handling into registry status flags
- Cancellation closes the client
- Setup failures abort before any status is registered
"""

import asyncio
from typing import List, Optional

import pytest

from sessionpool.realtime.events import (
    ConnectedEvent,
    ConnectingEvent,
    DisconnectedEvent,
    ErrorEvent,
    PublicationEvent,
    ServerSubscribedEvent,
    SubscribedEvent,
    SubscribeErrorEvent,
    SubscribingEvent,
    UnsubscribedEvent,
)
from sessionpool.sessions.registry import SessionRegistry
from sessionpool.sessions.session import SessionCounters
from sessionpool.sessions.worker import SessionWorker
from tests.helpers import wait_until

COOKIES = {"sessionid": "abc", "csrftoken": "xyz"}


class FakeClient:
    """Stand-in for RealtimeClient recording calls."""

    instances: List["FakeClient"] = []

    def __init__(self, endpoint, on_event, headers=None):
        self.endpoint = endpoint
        self.on_event = on_event
        self.headers = headers
        self.channels: List[str] = []
        self.started = False
        self.closed = False
        FakeClient.instances.append(self)

    def add_subscription(self, channel):
        self.channels.append(channel)

    def start(self):
        self.started = True

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_fake_clients():
    FakeClient.instances = []
    yield
    FakeClient.instances = []


async def idle_worker(session_id, broker_url, cookies, registry, cancel):
    await cancel.wait()


def make_worker(
    registry: SessionRegistry,
    session_id: str = "42",
    broker_url: str = "http://broker:8000",
    cancel: Optional[asyncio.Event] = None,
) -> SessionWorker:
    return SessionWorker(
        session_id,
        broker_url,
        COOKIES,
        registry,
        cancel or asyncio.Event(),
        client_factory=FakeClient,
    )


class TestWorkerRun:
    @pytest.mark.asyncio
    async def test_run_configures_client(self):
        registry = SessionRegistry(worker_factory=idle_worker)
        cancel = asyncio.Event()
        worker = make_worker(registry, broker_url="https://broker.example/api", cancel=cancel)

        task = asyncio.create_task(worker.run())
        await wait_until(lambda: FakeClient.instances and FakeClient.instances[0].started)

        client = FakeClient.instances[0]
        assert client.endpoint == "wss://broker.example/api/connection/websocket"
        assert client.headers == {"Cookie": "sessionid=abc; csrftoken=xyz"}
        assert client.channels == ["#42"]
        assert client.closed is False

        cancel.set()
        await asyncio.wait_for(task, timeout=1.0)
        assert client.closed is True

    @pytest.mark.asyncio
    async def test_http_maps_to_ws(self):
        registry = SessionRegistry(worker_factory=idle_worker)
        cancel = asyncio.Event()
        worker = make_worker(registry, broker_url="http://localhost:8000", cancel=cancel)

        task = asyncio.create_task(worker.run())
        await wait_until(lambda: bool(FakeClient.instances))
        cancel.set()
        await asyncio.wait_for(task, timeout=1.0)

        assert FakeClient.instances[0].endpoint == "ws://localhost:8000/connection/websocket"

    @pytest.mark.asyncio
    async def test_malformed_url_aborts_startup(self):
        registry = SessionRegistry(worker_factory=idle_worker)
        registry.add("42", "not a url", COOKIES)
        worker = make_worker(registry, broker_url="not a url")

        await asyncio.wait_for(worker.run(), timeout=1.0)

        assert FakeClient.instances == []
        assert registry.get_counters() == SessionCounters(total=1, connected=0, subscribed=0)
        registry.remove("42")

    @pytest.mark.asyncio
    async def test_missing_cookies_abort_startup(self):
        registry = SessionRegistry(worker_factory=idle_worker)
        worker = SessionWorker(
            "42", "http://broker:8000", {}, registry, asyncio.Event(),
            client_factory=FakeClient,
        )

        await asyncio.wait_for(worker.run(), timeout=1.0)

        assert FakeClient.instances == []

    @pytest.mark.asyncio
    async def test_already_cancelled_worker_exits(self):
        registry = SessionRegistry(worker_factory=idle_worker)
        cancel = asyncio.Event()
        cancel.set()

        await asyncio.wait_for(make_worker(registry, cancel=cancel).run(), timeout=1.0)

        assert FakeClient.instances == []


class TestWorkerEvents:
    @pytest.fixture
    def registry(self):
        return SessionRegistry(worker_factory=idle_worker)

    @pytest.mark.asyncio
    async def test_connect_and_subscribe(self, registry):
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)

        await worker.handle_event(ConnectedEvent(client_id="c1"))
        await worker.handle_event(SubscribedEvent(channel="#42"))

        session = registry.get("42")
        assert session.is_connected is True
        assert session.is_subscribed is True

    @pytest.mark.asyncio
    async def test_error_and_disconnect_clear_connected(self, registry):
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)

        await worker.handle_event(ConnectedEvent())
        await worker.handle_event(ErrorEvent(message="connection refused"))
        assert registry.get("42").is_connected is False

        await worker.handle_event(ConnectedEvent())
        await worker.handle_event(DisconnectedEvent(code=3001, reason="shutdown"))
        assert registry.get("42").is_connected is False

    @pytest.mark.asyncio
    async def test_subscribe_error_and_unsubscribe_clear_subscribed(self, registry):
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)

        await worker.handle_event(SubscribedEvent(channel="#42"))
        await worker.handle_event(UnsubscribedEvent(channel="#42"))
        assert registry.get("42").is_subscribed is False

        await worker.handle_event(SubscribedEvent(channel="#42"))
        await worker.handle_event(
            SubscribeErrorEvent(channel="#42", code=103, message="permission denied")
        )
        assert registry.get("42").is_subscribed is False

    @pytest.mark.asyncio
    async def test_reconnect_states_clear_flags(self, registry):
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)
        await worker.handle_event(ConnectedEvent(client_id="c1"))
        await worker.handle_event(SubscribedEvent(channel="#42"))

        await worker.handle_event(SubscribingEvent(channel="#42", code=0, reason="resubscribe"))
        assert registry.get("42").is_subscribed is False
        assert registry.get("42").is_connected is True

        await worker.handle_event(ConnectingEvent(code=1, reason="transport closed"))
        assert registry.get("42").is_connected is False

    @pytest.mark.asyncio
    async def test_publication_does_not_change_status(self, registry, caplog):
        caplog.set_level("INFO")
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)

        await worker.handle_event(PublicationEvent(channel="#42", data={"text": "hello"}))
        await worker.handle_event(ServerSubscribedEvent(channel="news", recovered=True))

        assert registry.get("42").is_connected is False
        assert registry.get("42").is_subscribed is False
        assert "[User 42] Received message from channel #42" in caplog.text

    @pytest.mark.asyncio
    async def test_events_after_removal_are_dropped(self, registry):
        registry.add("42", "http://broker:8000", COOKIES)
        worker = make_worker(registry)
        registry.remove("42")

        await worker.handle_event(ConnectedEvent())
        await worker.handle_event(SubscribedEvent(channel="#42"))

        assert registry.get("42") is None
        assert registry.get_counters() == SessionCounters(0, 0, 0)
