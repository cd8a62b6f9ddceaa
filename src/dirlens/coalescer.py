"""Single-flight coalescing of concurrent identical requests."""

import asyncio
import functools
import logging
import threading
from typing import Any, Awaitable, Callable, Optional

LOGGER = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[Any]]


class SingleFlight:
    """
    At most one in-flight operation per key.

    Callers that arrive while an operation for the same key is running
    await that same task and receive the same result or exception. The
    entry is dropped once the task settles, so the next call starts fresh.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._pending)

    def pending(self, key: str) -> Optional[asyncio.Task]:
        """The in-flight task for key, if any."""
        return self._pending.get(key)

    def in_flight(self, key: str) -> bool:
        """Whether an operation for key is running."""
        return key in self._pending

    def start(self, key: str, operation: Operation) -> asyncio.Task:
        """
        Ensure an operation for key is running and return its task.

        Must be called from within a running event loop.
        """
        with self._lock:
            task = self._pending.get(key)
            if task is not None:
                return task
            task = asyncio.ensure_future(operation())
            self._pending[key] = task
            task.add_done_callback(functools.partial(self._settle, key))
        LOGGER.debug("Started operation for %s", key)
        return task

    async def run(self, key: str, operation: Operation) -> Any:
        """Run operation for key, or join the one already in flight."""
        task = self.start(key, operation)
        # A cancelled waiter must not cancel the shared task
        return await asyncio.shield(task)

    def _settle(self, key: str, task: asyncio.Task) -> None:
        with self._lock:
            if self._pending.get(key) is task:
                del self._pending[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            LOGGER.debug("Operation for %s failed: %s", key, error)
