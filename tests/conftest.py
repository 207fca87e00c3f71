from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from resource_kit.application.interfaces.audio_output import AudioDecoder, AudioOutput
from resource_kit.application.interfaces.scheduler import Scheduler

# ============================================================================
# Virtual Clock Scheduler
# ============================================================================


class ManualTimer:
    """Timer handle recorded by :class:`ManualScheduler`."""

    def __init__(self, due: float, delay: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler driven by a virtual clock.

    ``lateness`` delays every fire by a fixed amount, the way a busy event
    loop runs timers late. ``fired_at`` records the clock value of each fire.
    """

    def __init__(self, start: float = 100.0, lateness: float = 0.0) -> None:
        self.time = start
        self.lateness = lateness
        self.timers: list[ManualTimer] = []
        self.fired_at: list[float] = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.time + delay, delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.time + seconds
        while True:
            due = [t for t in self.pending if t.due + self.lateness <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.time = max(self.time, timer.due + self.lateness)
            timer.fired = True
            self.fired_at.append(self.time)
            timer.callback()
        self.time = target


class NonCancellingScheduler(ManualScheduler):
    """Scheduler whose cancel never wins the race against a fire."""

    def cancel(self, handle: ManualTimer) -> None:  # type: ignore[override]
        pass


# ============================================================================
# Fake Audio Output
# ============================================================================


class FakeAudioOutput(AudioOutput):
    """In-memory output whose playhead follows a clock while playing."""

    def __init__(self, duration: float, clock: Callable[[], float]) -> None:
        self._duration = duration
        self._clock = clock
        self._base = 0.0
        self._started_at: float | None = None
        self._volume = 1.0
        self._loop_count = 0
        self.accept_play = True
        self.on_finished: Callable[[], None] | None = None
        self.calls: list[str] = []
        self.play_times: list[float] = []
        self.seeks: list[float] = []
        self.closed = False

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def current_time(self) -> float:
        if self._started_at is None:
            return self._base
        return min(self._base + self._clock() - self._started_at, self._duration)

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        self._base = max(0.0, min(seconds, self._duration))
        self.seeks.append(self._base)
        if self._started_at is not None:
            self._started_at = self._clock()

    @property
    def is_playing(self) -> bool:
        return self._started_at is not None

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value

    @property
    def loop_count(self) -> int:
        return self._loop_count

    @loop_count.setter
    def loop_count(self, value: int) -> None:
        self._loop_count = value

    def play(self) -> bool:
        self.calls.append("play")
        if not self.accept_play:
            return False
        if self._started_at is None:
            self._started_at = self._clock()
        self.play_times.append(self._clock())
        return True

    def pause(self) -> None:
        self.calls.append("pause")
        self._base = self.current_time
        self._started_at = None

    def stop(self) -> None:
        self.calls.append("stop")
        self._base = self.current_time
        self._started_at = None

    def close(self) -> None:
        self.stop()
        self.closed = True

    def set_on_finished(self, callback: Callable[[], None] | None) -> None:
        self.on_finished = callback

    def finish(self) -> None:
        """Simulate the source reaching its natural end."""
        self._base = self._duration
        self._started_at = None
        if self.on_finished is not None:
            self.on_finished()


class FakeDecoder(AudioDecoder):
    """Decoder producing :class:`FakeAudioOutput`; ``b"bad"`` fails."""

    def __init__(self, duration: float, clock: Callable[[], float]) -> None:
        self.duration = duration
        self.clock = clock
        self.outputs: list[FakeAudioOutput] = []

    def decode(self, data: bytes) -> FakeAudioOutput:
        if data == b"bad":
            raise ValueError("unsupported encoding")
        output = FakeAudioOutput(self.duration, self.clock)
        self.outputs.append(output)
        return output

    @property
    def last(self) -> FakeAudioOutput:
        return self.outputs[-1]


class EventRecorder:
    """Collects player notifications."""

    def __init__(self) -> None:
        self.states: list[bool] = []
        self.finished = 0

    def attach(self, player) -> None:
        player.on_playback_state_change = self.states.append
        player.on_playback_finished = self.on_finished

    def on_finished(self) -> None:
        self.finished += 1


# ============================================================================
# Player Fixtures
# ============================================================================


@pytest.fixture
def scheduler():
    """Virtual clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def decoder(scheduler):
    """Fake decoder producing 10 second sources."""
    return FakeDecoder(10.0, scheduler.now)


@pytest.fixture
def events():
    return EventRecorder()


@pytest.fixture
def player(decoder, scheduler, events):
    """Segment player with fake collaborators and an event recorder attached."""
    from resource_kit.application.services.segment_player import SegmentPlayer

    player = SegmentPlayer(decoder, scheduler)
    events.attach(player)
    return player


@pytest.fixture
def loaded_player(player):
    """Player with a 10 second source loaded."""
    player.load(b"audio")
    return player


# ============================================================================
# Resource Fixtures
# ============================================================================


@pytest.fixture
def index_document():
    return {
        "schema": 1,
        "title": "Warmups",
        "setId": "warmups-en",
        "version": "2024.1",
        "futureField": {"ignored": True},
        "items": [
            {"id": "c", "target": {"kind": "resource", "ref": "pkg/c"}},
            {
                "id": "b",
                "order": 2,
                "target": {"kind": "resource", "ref": "pkg/b"},
                "payload": {"title": "Bee", "level": 2, "tags": ["x", "y"]},
            },
            {
                "id": "a",
                "order": 1,
                "target": {"kind": "resource", "ref": "pkg/a"},
                "payload": None,
            },
        ],
    }


@pytest.fixture
def resource_root(tmp_path, index_document):
    """A resource directory with an index manifest and a scoped audio file."""
    (tmp_path / "index.json").write_text(json.dumps(index_document), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    sounds = tmp_path / "sounds"
    sounds.mkdir()
    (sounds / "tick.mp3").write_bytes(b"audio")
    return tmp_path
