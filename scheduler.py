"""
Deferred callbacks for reservation expiry and periodic sweeps.

Usage:
    scheduler = AsyncioScheduler()
    handle = scheduler.schedule_once(300, expire_reservation)
    handle.cancel()

The callback is a zero-argument coroutine function. It runs as its own
task on the running loop; exceptions are logged, never propagated.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger('tillman')

Callback = Callable[[], Awaitable[None]]


class Handle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Arms single-shot deferred callbacks."""

    def schedule_once(self, delay: float, callback: Callback) -> Handle:
        ...


class AsyncioScheduler:
    """Scheduler on top of ``loop.call_later``."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def schedule_once(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(delay, 0), self._spawn, callback)

    def _spawn(self, callback: Callback) -> None:
        task = asyncio.ensure_future(callback())
        self._tasks.add(task)
        task.add_done_callback(self._done)

    def _done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("scheduler.callback.failed", exc_info=exc)

    async def drain(self) -> None:
        """Wait for callbacks that already fired to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
