"""Immutable value objects for the playback bounded context."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from resource_kit.domain.shared.messages import ErrorMessages

INFINITE_LOOPS = -1
"""Sentinel loop count meaning "never stop restarting"."""


class PlayerState(Enum):
    """Player state owned by the segment player.

    State transitions:
    - IDLE -> LOADED_STOPPED (load)
    - LOADED_STOPPED -> PLAYING_WHOLE (play) | PLAYING_SEGMENT (play_segment)
    - PLAYING_WHOLE -> LOADED_STOPPED (pause, stop, natural completion)
    - PLAYING_SEGMENT -> PAUSED_SEGMENT (pause) | LOADED_STOPPED (stop, last cycle ends)
    - PAUSED_SEGMENT -> PLAYING_SEGMENT (play) | LOADED_STOPPED (stop)
    - Any loaded state -> LOADED_STOPPED (load of a new source)
    """

    IDLE = "idle"
    LOADED_STOPPED = "loaded_stopped"
    PLAYING_WHOLE = "playing_whole"
    PLAYING_SEGMENT = "playing_segment"
    PAUSED_SEGMENT = "paused_segment"

    @property
    def is_loaded(self) -> bool:
        return self != PlayerState.IDLE

    @property
    def is_playing(self) -> bool:
        return self in {PlayerState.PLAYING_WHOLE, PlayerState.PLAYING_SEGMENT}


class LoopKind(Enum):
    ONCE = "once"
    TIMES = "times"
    INFINITE = "infinite"


@dataclass(frozen=True)
class Looping:
    """How many times a segment is repeated.

    ``Looping.times(3)`` plays the segment four times in total: once plus
    three restarts. ``Looping.times(0)`` behaves like ``Looping.once()``.
    """

    kind: LoopKind = LoopKind.ONCE
    count: int = 0

    @classmethod
    def once(cls) -> Looping:
        return cls(LoopKind.ONCE, 0)

    @classmethod
    def times(cls, count: int) -> Looping:
        return cls(LoopKind.TIMES, count)

    @classmethod
    def infinite(cls) -> Looping:
        return cls(LoopKind.INFINITE, 0)

    @classmethod
    def parse(cls, value: str | int) -> Looping:
        """Parse ``"once"``, ``"infinite"`` or an extra-play count."""
        if isinstance(value, int):
            return cls.times(value)
        text = value.strip().lower()
        if text == LoopKind.ONCE.value:
            return cls.once()
        if text in {LoopKind.INFINITE.value, "inf", "forever"}:
            return cls.infinite()
        try:
            return cls.times(int(text))
        except ValueError:
            raise ValueError(ErrorMessages.INVALID_LOOP_SPEC.format(value=value)) from None

    @property
    def remaining_loops(self) -> int:
        """Restart budget for a fresh segment."""
        if self.kind == LoopKind.INFINITE:
            return INFINITE_LOOPS
        if self.kind == LoopKind.TIMES:
            return max(self.count, 0)
        return 0

    def __str__(self) -> str:
        if self.kind == LoopKind.TIMES:
            return f"times({self.count})"
        return self.kind.value


@dataclass(frozen=True)
class SegmentDescriptor:
    """The active ranged play.

    ``anchor`` is the scheduler time at which the current cycle logically
    began. It only ever advances by exactly ``length`` per restart, so
    timer lateness never accumulates across cycles.
    """

    start: float
    length: float
    remaining_loops: int
    anchor: float
    paused_remaining: float | None = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(ErrorMessages.NEGATIVE_SEGMENT_START)
        if self.length <= 0:
            raise ValueError(ErrorMessages.NON_POSITIVE_SEGMENT_LENGTH)

    @property
    def end(self) -> float:
        return self.start + self.length

    @property
    def is_infinite(self) -> bool:
        return self.remaining_loops == INFINITE_LOOPS

    @property
    def has_restarts(self) -> bool:
        return self.remaining_loops > 0 or self.is_infinite

    @property
    def next_fire_at(self) -> float:
        """Scheduler time at which the current cycle ends."""
        return self.anchor + self.length

    def remaining_at(self, position: float) -> float:
        """Time left in the cycle for a playhead at ``position``."""
        return max(0.0, self.length - (position - self.start))

    def after_restart(self) -> SegmentDescriptor:
        """Descriptor for the next cycle: anchor advanced by one length."""
        remaining = self.remaining_loops if self.is_infinite else self.remaining_loops - 1
        return replace(self, remaining_loops=remaining, anchor=self.anchor + self.length)

    def paused_at(self, position: float) -> SegmentDescriptor:
        return replace(self, paused_remaining=self.remaining_at(position))

    def resumed(self, now: float) -> SegmentDescriptor:
        """Re-anchor so the current cycle ends ``paused_remaining`` after ``now``."""
        remaining = self.length if self.paused_remaining is None else self.paused_remaining
        return replace(self, anchor=now - (self.length - remaining), paused_remaining=None)
