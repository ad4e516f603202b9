"""Optimistic state updates with rollback when persistence fails.

``OptimisticValue`` applies one update at a time, ``OptimisticRetryValue``
retries the persist step before rolling back, and ``OptimisticUpdateQueue``
serializes many updates so persist calls never overlap.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

PersistFn = Callable[[], Awaitable[Any]]


def _apply(new_state: Any, current: Any) -> Any:
    return new_state(current) if callable(new_state) else new_state


class OptimisticValue(Generic[T]):
    def __init__(self, initial: T, on_error: Callable[[Exception], None] | None = None) -> None:
        self.data = initial
        self.pending = False
        self.error: Exception | None = None
        self._previous = initial
        self._on_error = on_error

    async def update(self, new_state: T | Callable[[T], T], persist: PersistFn) -> None:
        """Apply ``new_state`` now, then persist; restore the prior state and re-raise on failure."""
        self._previous = self.data
        self.data = _apply(new_state, self.data)
        self.pending = True
        self.error = None
        try:
            await persist()
        except Exception as e:
            self.data = self._previous
            self.error = e
            if self._on_error is not None:
                self._on_error(e)
            raise
        finally:
            self.pending = False

    def reset(self) -> None:
        """Restore the state from before the last update."""
        self.data = self._previous
        self.pending = False
        self.error = None

    def set_data(self, data: T) -> None:
        self.data = data


class OptimisticRetryValue(Generic[T]):
    def __init__(self, initial: T, max_retries: int = 3, retry_delay: float = 1.0) -> None:
        self.data = initial
        self.pending = False
        self.error: Exception | None = None
        self.retry_count = 0
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    async def update(self, new_state: T | Callable[[T], T], persist: PersistFn) -> None:
        """Like ``OptimisticValue.update`` but retries ``persist`` with a linear delay first."""
        previous = self.data
        self.data = _apply(new_state, self.data)
        self.pending = True
        self.error = None
        self.retry_count = 0

        attempt = 0
        while True:
            try:
                await persist()
                break
            except Exception as e:
                if attempt < self._max_retries:
                    self.retry_count = attempt + 1
                    logger.debug("Persist failed, retry %d/%d: %s", attempt + 1, self._max_retries, e)
                    await asyncio.sleep(self._retry_delay * (attempt + 1))
                    attempt += 1
                    continue
                self.data = previous
                self.pending = False
                self.error = e
                self.retry_count = 0
                raise

        self.pending = False
        self.retry_count = 0


@dataclass
class _QueuedUpdate(Generic[T]):
    id: str
    update: Callable[[], T]
    persist: PersistFn
    rollback: Callable[[], T]


class OptimisticUpdateQueue(Generic[T]):
    """FIFO of optimistic updates, persisted one at a time.

    A failed entry rolls back through its own ``rollback`` (by default the
    current state is kept), is reported to ``on_error`` and the queue moves on.
    """

    def __init__(
        self,
        initial_state: T,
        on_state_change: Callable[[T], None],
        on_error: Callable[[Exception, str], None] | None = None,
    ) -> None:
        self._state = initial_state
        self._on_state_change = on_state_change
        self._on_error = on_error
        self._queue: deque[_QueuedUpdate[T]] = deque()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> T:
        return self._state

    def add(
        self,
        update_id: str,
        update: Callable[[], T],
        persist: PersistFn,
        rollback: Callable[[], T] | None = None,
    ) -> None:
        self._queue.append(_QueuedUpdate(update_id, update, persist, rollback or (lambda: self._state)))
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._process())

    async def _process(self) -> None:
        while self._queue:
            item = self._queue.popleft()
            self._state = item.update()
            self._on_state_change(self._state)
            try:
                await item.persist()
            except Exception as e:
                logger.warning("Optimistic update %s failed, rolling back: %s", item.id, e)
                self._state = item.rollback()
                self._on_state_change(self._state)
                if self._on_error is not None:
                    self._on_error(e, item.id)

    async def join(self) -> None:
        """Wait until every queued update has been processed."""
        if self._task is not None:
            await self._task

    def clear(self) -> None:
        self._queue.clear()

    def size(self) -> int:
        return len(self._queue)
