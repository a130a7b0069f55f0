"""Cancellable periodic tasks driven by the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

# A tick returns False to stop the timer after that tick.
TickCallback = Callable[[], Awaitable[bool]]


class PeriodicTimer:
    """Runs *on_tick* every *interval* seconds in a background task.

    At most one task is alive per timer: ``start`` cancels the running one
    first, and ``stop`` may be called any number of times.
    """

    def __init__(self, name: str, interval: float, on_tick: TickCallback) -> None:
        self.name = name
        self._interval = interval
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """(Re)start the timer; must be called from within a running loop."""
        self.stop()
        self._task = asyncio.create_task(self._run(), name=f"timer:{self.name}")
        logger.debug("Timer %s started", self.name)

    def stop(self) -> None:
        """Cancel the timer.  No-op when it is not running."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # A tick stopping its own timer just lets the loop return.
        if task is not asyncio.current_task():
            task.cancel()
        logger.debug("Timer %s stopped", self.name)

    async def _run(self) -> None:
        current = asyncio.current_task()
        while self._task is current:
            await asyncio.sleep(self._interval)
            if not await self._on_tick():
                break
        if self._task is current:
            self._task = None
