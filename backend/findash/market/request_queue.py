"""Serializing queue for calls to the quota-constrained provider."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestQueue:
    """Runs queued coroutine functions one at a time, spaced by min_delay.

    Guarantees:
      - at most one task in flight at any moment
      - consecutive task starts are at least min_delay seconds apart
      - each caller's add() resolves/raises with its own task's outcome

    A background asyncio task drains the queue and exits once it is empty;
    the next add() starts a fresh one.
    """

    def __init__(
        self,
        min_delay: float = 12.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._min_delay = min_delay
        self._clock = clock
        self._sleep = sleep
        self._queue: deque[tuple[Callable[[], Awaitable[Any]], asyncio.Future]] = deque()
        self._last_start: float | None = None
        self._worker: asyncio.Task | None = None

    async def add(self, task: Callable[[], Awaitable[T]]) -> T:
        """Enqueue a zero-argument coroutine function and await its result."""
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.append((task, future))
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._drain(), name="request-queue")
        return await future

    @property
    def pending(self) -> int:
        """Number of tasks waiting to start."""
        return len(self._queue)

    async def _drain(self) -> None:
        while self._queue:
            if self._last_start is not None:
                wait = self._min_delay - (self._clock() - self._last_start)
                if wait > 0:
                    logger.debug("Request queue waiting %.2fs (%d pending)", wait, len(self._queue))
                    await self._sleep(wait)

            task, future = self._queue.popleft()
            if future.cancelled():
                # The caller stopped waiting; don't spend a slot on it
                continue

            self._last_start = self._clock()
            try:
                result = await task()
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)
