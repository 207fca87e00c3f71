"""Port interface for one-shot timers on the control loop."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Clock and one-shot timer facility.

    Callbacks must run on the same thread or loop that calls the player, so
    no locking is needed around player state.
    """

    @abstractmethod
    def now(self) -> float:
        """Current monotonic time in seconds."""
        ...

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...

    def cancel(self, handle: TimerHandle) -> None:
        """Cancel a pending timer. Cancelling a fired timer is a no-op."""
        handle.cancel()
