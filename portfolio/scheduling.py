"""
Timers for the event loop: trailing debounce and fixed-interval repetition.

Both helpers must be used from inside a running asyncio loop.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from portfolio.logging import get_logger

logger = get_logger("scheduling")


class Debouncer:
    """
    Trailing-edge debounce.

    Every ``trigger`` restarts the delay; the callback runs once, with the
    arguments of the last trigger, after ``delay`` seconds of quiet.
    """

    def __init__(self, delay: float, callback: Callable[..., None]) -> None:
        self.delay = delay
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        self._args = args
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Run a pending callback immediately."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        args, self._args = self._args, ()
        self.callback(*args)


class PeriodicTask:
    """
    Call a coroutine function every ``interval`` seconds until stopped.

    The first call happens one interval after ``start()``. A failing call is
    logged and the schedule continues.
    """

    def __init__(self, interval: float, func: Callable[[], Awaitable[Any]], name: str = "periodic") -> None:
        self.interval = interval
        self.func = func
        self.name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "PeriodicTask":
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        return self

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.func()
            except Exception:
                logger.exception("Periodic task %s failed", self.name)

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
