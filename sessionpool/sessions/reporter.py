import asyncio
from typing import Optional
import logging

from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class CountersReporter:
    """
    Logs registry totals on a fixed interval until stopped.
    Read-only: never changes registry state.
    """

    def __init__(self, registry: SessionRegistry, interval: float = 60.0):
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._report_loop(), name="counters-reporter")
            logger.info(f"Started counters reporter (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Stopped counters reporter")

    def report(self) -> None:
        counters = self.registry.get_counters()
        logger.info(
            f"Total users {counters.total} connected {counters.connected} "
            f"subscribed {counters.subscribed}"
        )

    async def _report_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.report()
