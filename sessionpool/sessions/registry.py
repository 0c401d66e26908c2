import asyncio
from dataclasses import replace
from typing import Any, Callable, Coroutine, Dict, List, Optional
from threading import Lock
import logging

from .session import Session, SessionCounters

logger = logging.getLogger(__name__)


# Worker factory: (session_id, broker_url, cookies, registry, cancel) -> coroutine
WorkerFactory = Callable[
    [str, str, Dict[str, str], "SessionRegistry", asyncio.Event],
    Coroutine[Any, Any, None],
]


def _default_worker_factory(
    session_id: str,
    broker_url: str,
    cookies: Dict[str, str],
    registry: "SessionRegistry",
    cancel: asyncio.Event,
) -> Coroutine[Any, Any, None]:
    from .worker import SessionWorker

    return SessionWorker(session_id, broker_url, cookies, registry, cancel).run()


class SessionRegistry:
    """
    Thread-safe store of all live sessions.

    CONCURRENCY STRATEGY:
    - One lock guards the map, the status flags and the counters snapshot
    - A session is in the map if and only if its worker task is running
      (or scheduled to run)
    - Cancellation is an asyncio.Event: setting it never blocks and can be
      repeated, so remove() cannot stall on a worker that is not waiting yet
    - add() must run on the event loop; remove/remove_all may be called from
      any thread, the cancel event is then set through call_soon_threadsafe
    - Status updates for ids no longer in the map are dropped
    """

    def __init__(self, worker_factory: Optional[WorkerFactory] = None):
        self._sessions: Dict[str, Session] = {}
        self._lock = Lock()
        self._worker_factory = worker_factory or _default_worker_factory
        logger.info("SessionRegistry initialized")

    def add(self, session_id: str, broker_url: str, cookies: Dict[str, str]) -> bool:
        """
        Register a session and start its worker.
        Returns False without side effects if the id is already present.
        """
        with self._lock:
            if session_id in self._sessions:
                return False

            session = Session(id=session_id)
            worker = self._worker_factory(
                session_id, broker_url, cookies, self, session.cancel
            )
            try:
                session.worker = asyncio.create_task(worker, name=f"session-{session_id}")
            except RuntimeError:
                worker.close()
                raise

            self._sessions[session_id] = session
            session.worker.add_done_callback(self._on_worker_done)
            logger.info(f"Added session {session_id}")
            return True

    def remove(self, session_id: str) -> bool:
        """
        Cancel the worker and delete the session.
        Returns False if the id is not present.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            self._deliver_cancel(session)
            logger.info(f"Removed session {session_id}")
            return True

    def remove_all(self) -> int:
        """
        Cancel and remove every session in one sweep under the lock.
        Returns the number of removed sessions.
        """
        return len(self._pop_all())

    def _pop_all(self) -> List[Session]:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            for session in sessions:
                self._deliver_cancel(session)
        if sessions:
            logger.info(f"Removed all sessions ({len(sessions)})")
        return sessions

    def set_connected(self, session_id: str, state: bool) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.is_connected = state

    def set_subscribed(self, session_id: str, state: bool) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.is_subscribed = state

    def get(self, session_id: str) -> Optional[Session]:
        """Return a snapshot copy of the session, or None."""
        with self._lock:
            session = self._sessions.get(session_id)
            return replace(session) if session is not None else None

    def get_counters(self) -> SessionCounters:
        """
        Point-in-time totals of sessions by status.
        """
        with self._lock:
            connected = 0
            subscribed = 0
            for session in self._sessions.values():
                if session.is_connected:
                    connected += 1
                if session.is_subscribed:
                    subscribed += 1
            return SessionCounters(
                total=len(self._sessions),
                connected=connected,
                subscribed=subscribed,
            )

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    async def shutdown(self) -> None:
        """
        Cancel every session and wait for the workers to finish.
        Called during graceful shutdown.
        """
        sessions = self._pop_all()
        workers = [s.worker for s in sessions if s.worker is not None]
        await asyncio.gather(*workers, return_exceptions=True)
        logger.info("All session workers stopped")

    @staticmethod
    def _deliver_cancel(session: Session) -> None:
        loop = session.worker.get_loop() if session.worker is not None else None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if loop is None or loop is running:
            session.cancel.set()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(session.cancel.set)

    @staticmethod
    def _on_worker_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Worker {task.get_name()} failed: {exc!r}")
