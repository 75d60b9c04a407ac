"""Periodic background tasks on the running event loop."""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from src.hubsync.core.logging import get_logger

logger = get_logger(__name__)


class PeriodicTask:
    """Runs a coroutine function every ``interval`` seconds until stopped.

    The first run happens one interval after ``start()``. Runs never overlap:
    the next wait starts when the previous run has returned. A run that raises
    is logged and the schedule continues.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        func: Callable[[], Awaitable[object]],
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Interval for task '{name}' must be positive")
        self.name = name
        self.interval = interval
        self._func = func
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the task on the running loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("Periodic task started", task=self.name, interval=self.interval)

    async def stop(self) -> None:
        """Cancel the task and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Periodic task stopped", task=self.name, runs=self.runs)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self._func()
            except Exception as e:
                logger.exception("Periodic task run failed", task=self.name, error=str(e))
            self.runs += 1
