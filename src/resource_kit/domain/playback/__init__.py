"""Playback bounded context."""

from resource_kit.domain.playback.value_objects import (
    INFINITE_LOOPS,
    Looping,
    LoopKind,
    PlayerState,
    SegmentDescriptor,
)

__all__ = [
    "INFINITE_LOOPS",
    "LoopKind",
    "Looping",
    "PlayerState",
    "SegmentDescriptor",
]
