"""Port interfaces for decoding and playing audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable


class AudioOutput(ABC):
    """A decoded audio source bound to an output device.

    The segment player treats ``is_playing`` as a cache of its own state and
    never as the source of truth.
    """

    @property
    @abstractmethod
    def duration(self) -> float:
        """Total length of the source in seconds."""
        ...

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Playhead position in seconds."""
        ...

    @current_time.setter
    @abstractmethod
    def current_time(self, seconds: float) -> None:
        """Seek the playhead."""
        ...

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @property
    @abstractmethod
    def volume(self) -> float:
        ...

    @volume.setter
    @abstractmethod
    def volume(self, value: float) -> None:
        ...

    @property
    @abstractmethod
    def loop_count(self) -> int:
        """Whole-file loop count: 0 once, n extra plays, -1 infinite."""
        ...

    @loop_count.setter
    @abstractmethod
    def loop_count(self, value: int) -> None:
        ...

    @abstractmethod
    def play(self) -> bool:
        """Start or continue playback from the playhead. Returns False if rejected."""
        ...

    @abstractmethod
    def pause(self) -> None:
        """Pause playback, keeping the playhead."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop playback."""
        ...

    @abstractmethod
    def set_on_finished(self, callback: Callable[[], None] | None) -> None:
        """Set callback for when the whole file finishes playing naturally."""
        ...

    def close(self) -> None:
        """Release device resources."""
        self.stop()


class AudioDecoder(ABC):
    """Interface for turning encoded bytes into a playable output."""

    @abstractmethod
    def decode(self, data: bytes) -> AudioOutput:
        """Decode ``data``. Raises any exception if the encoding is unsupported."""
        ...
