"""
Asyncio Scheduler

One-shot timers on an asyncio event loop. The loop thread is the player's
control thread, so timer callbacks never race with player calls.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from resource_kit.application.interfaces.scheduler import Scheduler


class AsyncioScheduler(Scheduler):
    """Scheduler backed by ``loop.call_later`` and ``loop.time()``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the scheduler.

        Args:
            loop: Event loop to schedule on. Defaults to the running loop,
                resolved lazily on first use.
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)
