import asyncio
from typing import Dict, List


class WorkerRecorder:
    """Worker factory that parks each worker on its cancel event."""

    def __init__(self):
        self.started: List[str] = []
        self.finished: List[str] = []
        self.cookies: Dict[str, Dict[str, str]] = {}
        self.urls: Dict[str, str] = {}

    def __call__(self, session_id, broker_url, cookies, registry, cancel):
        self.started.append(session_id)
        self.cookies[session_id] = cookies
        self.urls[session_id] = broker_url
        return self._run(session_id, cancel)

    async def _run(self, session_id: str, cancel: asyncio.Event) -> None:
        await cancel.wait()
        self.finished.append(session_id)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true or fail after ``timeout``."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
