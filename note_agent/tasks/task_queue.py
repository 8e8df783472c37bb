"""Single-worker FIFO task queue with a pacing delay between tasks."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, Union

from note_agent.infrastructure.logging.logger import logger


Task = Callable[[], Awaitable[None]]
DelaySource = Union[int, Callable[[], int]]


class TaskQueue:
    """Run queued coroutines one at a time, in submission order.

    Attributes:
        delay_ms: pause after each task, either a constant or a callable read
            before every pause so settings changes apply to the next gap.
        running: true while a drain loop is active.

    Tasks are expected to handle their own errors. A task that still raises is
    logged and the loop moves on to the next one.
    """

    def __init__(
        self,
        delay_ms: DelaySource = 3000,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._delay_ms = delay_ms
        self._sleep = sleep or asyncio.sleep
        self._queue: Deque[Task] = deque()
        self._running = False
        self._drain_task: Optional[asyncio.Future] = None

    @property
    def running(self) -> bool:
        return self._running

    def __len__(self) -> int:
        return len(self._queue)

    def current_delay_ms(self) -> int:
        value = self._delay_ms() if callable(self._delay_ms) else self._delay_ms
        return max(0, int(value))

    def enqueue(self, task: Task) -> None:
        """Append a task; start draining unless a drain loop is already active."""

        self._queue.append(task)
        if self._running:
            return
        # flag flips before the loop is scheduled so a second enqueue in the
        # same tick only appends
        self._running = True
        self._drain_task = asyncio.ensure_future(self._drain())

    async def _drain(self) -> None:
        try:
            while self._queue:
                task = self._queue.popleft()
                try:
                    await task()
                except Exception:  # noqa: BLE001 - one bad task must not stop the queue
                    logger.exception(
                        "Queued task failed",
                        extra={"extra": {"pending": len(self._queue)}},
                    )
                await self._sleep(self.current_delay_ms() / 1000)
        finally:
            # no await between the empty check above and this reset
            self._running = False

    async def join(self) -> None:
        """Wait until the queue is empty and no task is running."""

        while self._running and self._drain_task is not None:
            # shield: a cancelled waiter must not cancel the drain loop
            await asyncio.shield(self._drain_task)

    async def aclose(self) -> None:
        await self.join()
        self._drain_task = None
