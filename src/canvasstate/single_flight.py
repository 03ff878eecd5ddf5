"""
Single-flight load primitive.

At most one load runs per key. Every requester observes the same outcome:

    flights = SingleFlight()
    a, b = await asyncio.gather(flights.load("clock", loader), flights.load("clock", loader))
    # loader was called once; a is b

Outcomes are kept for the lifetime of the SingleFlight. A failed load stays
failed: there is no retry and no invalidation. A cancelled load counts as
failed and is reported as LoadCancelledError.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from canvasstate.errors import LoadCancelledError

logger = logging.getLogger(__name__)

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class LoadState(Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class SingleFlight(Generic[K, V]):
    """Keyed map of shared load tasks with observable state."""

    def __init__(self):
        self._tasks: Dict[K, 'asyncio.Task[V]'] = {}

    def start(self, key: K, loader: Callable[[], Awaitable[V]]) -> 'asyncio.Task[V]':
        """Start the load for key unless one was already started.

        Must be called with a running event loop. Returns the shared task.
        """
        task = self._tasks.get(key)
        if task is not None:
            return task

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(key, loader))
        task.add_done_callback(self._on_done)
        self._tasks[key] = task
        logger.debug(f"Started load: {key!r}")
        return task

    async def load(self, key: K, loader: Callable[[], Awaitable[V]]) -> V:
        """Await the shared outcome for key, starting the load if needed.

        Cancelling the caller does not cancel the load.
        """
        return await asyncio.shield(self.start(key, loader))

    def state(self, key: K) -> Optional[LoadState]:
        """None if no load was ever started for key."""
        task = self._tasks.get(key)
        if task is None:
            return None
        if not task.done():
            return LoadState.PENDING
        if task.cancelled() or task.exception() is not None:
            return LoadState.FAILED
        return LoadState.READY

    def result(self, key: K) -> V:
        """Loaded value. Raises the load error if failed, RuntimeError if not ready."""
        task = self._tasks.get(key)
        if task is None or not task.done():
            raise RuntimeError(f"Load for {key!r} has not completed")
        if task.cancelled():
            raise LoadCancelledError(key)
        return task.result()

    def error(self, key: K) -> Optional[BaseException]:
        task = self._tasks.get(key)
        if task is None or not task.done():
            return None
        if task.cancelled():
            return LoadCancelledError(key)
        return task.exception()

    def keys(self) -> List[K]:
        return list(self._tasks)

    def __contains__(self, key: object) -> bool:
        return key in self._tasks

    @staticmethod
    async def _run(key: Any, loader: Callable[[], Awaitable[V]]) -> V:
        return await loader()

    def _on_done(self, task: 'asyncio.Task') -> None:
        # Retrieving the exception here marks it handled for the event loop
        if task.cancelled():
            logger.warning(f"Load task cancelled: {task!r}")
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Load failed: {error!r}")
