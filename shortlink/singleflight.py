"""Per-key single-flight execution on asyncio."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional


class SingleFlight:
    """Runs at most one coroutine per key at a time.

    The first caller for a key starts a task; callers arriving while it runs
    join the same task. Tasks are detached from their callers: a caller that
    is cancelled stops waiting, but the task runs to completion. Keys are
    independent, so unrelated keys never wait on each other.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._flights: Dict[str, asyncio.Task] = {}

    def start(self, key: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Return the in-flight task for ``key``, starting one if needed.

        ``factory`` is only called when no task is running for ``key``.
        """
        task = self._flights.get(key)
        if task is None:
            task = asyncio.create_task(factory(), name=f"singleflight:{key}")
            self._flights[key] = task
            task.add_done_callback(lambda t, k=key: self._finish(k, t))
        return task

    async def do(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Run or join the flight for ``key`` and return its result."""
        return await asyncio.shield(self.start(key, factory))

    def in_flight(self, key: str) -> bool:
        """True while a task for ``key`` is running."""
        return key in self._flights

    def pending(self) -> list:
        """Tasks currently running, across all keys."""
        return list(self._flights.values())

    async def drain(self) -> None:
        """Wait for every running flight to finish."""
        tasks = self.pending()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _finish(self, key: str, task: asyncio.Task) -> None:
        if self._flights.get(key) is task:
            del self._flights[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.debug(f"Flight for {key} failed: {error!r}")
