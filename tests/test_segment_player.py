"""
Tests for SegmentPlayer - Timer-Driven Segment Playback

Tests for the segment player including:
- Loading and decode failures
- Whole-file play, pause, stop and natural completion
- Segment clamping, validation and looping
- Drift-free restart scheduling
- Pause and resume inside a segment cycle
- Control thread enforcement
- Timing on a real asyncio event loop
"""

import asyncio
import threading

import pytest

from resource_kit.application.services.segment_player import SegmentPlayer
from resource_kit.config.settings import PlayerSettings
from resource_kit.domain.playback.value_objects import INFINITE_LOOPS, Looping, PlayerState
from resource_kit.domain.shared.exceptions import (
    ControlThreadError,
    DecodeFailedError,
    InvalidRangeError,
    NotLoadedError,
    PlayFailedError,
    ResourceNotFoundError,
)
from resource_kit.infrastructure.resources.directory_source import DirectoryResourceSource
from resource_kit.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler

from conftest import FakeDecoder, ManualScheduler, NonCancellingScheduler

# =============================================================================
# Loading Tests
# =============================================================================


class TestLoad:
    """Tests for loading sources."""

    def test_initial_state_is_idle(self, player):
        """Should start idle with nothing loaded."""
        assert player.state == PlayerState.IDLE
        assert player.is_loaded is False
        assert player.is_playing is False
        assert player.duration == 0.0
        assert player.current_time == 0.0

    def test_load_moves_to_loaded_stopped(self, player, events):
        """Should decode the bytes and become loaded without emitting."""
        player.load(b"audio")

        assert player.state == PlayerState.LOADED_STOPPED
        assert player.is_loaded is True
        assert player.duration == 10.0
        assert events.states == []

    def test_load_applies_loops_and_volume(self, player, decoder):
        """Should push the whole-file loop count and volume to the new output."""
        player.number_of_loops = 2
        player.volume = 0.3

        player.load(b"audio")

        assert decoder.last.loop_count == 2
        assert decoder.last.volume == 0.3

    def test_decode_failure_raises_and_stays_idle(self, player):
        """Should wrap decoder errors and keep the idle state."""
        with pytest.raises(DecodeFailedError) as exc_info:
            player.load(b"bad")

        assert isinstance(exc_info.value.underlying, ValueError)
        assert exc_info.value.code == "DECODE_FAILED"
        assert player.state == PlayerState.IDLE

    def test_decode_failure_keeps_previous_source(self, loaded_player, decoder):
        """Should keep the previously loaded source when a new one fails to decode."""
        previous = decoder.last

        with pytest.raises(DecodeFailedError):
            loaded_player.load(b"bad")

        assert loaded_player.is_loaded is True
        assert previous.closed is False
        assert loaded_player.state == PlayerState.LOADED_STOPPED

    def test_reload_during_segment_clears_state(self, loaded_player, decoder, scheduler, events):
        """Should cancel the timer, close the old output and report stopped playback."""
        loaded_player.play_segment(0.0, 5.0, Looping.infinite())
        first = decoder.last

        loaded_player.load(b"other")

        assert first.closed is True
        assert loaded_player.segment is None
        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert scheduler.pending == []
        assert events.states == [True, False]

    def test_load_resource_from_directory(self, player, resource_root):
        """Should resolve a named resource and load its bytes."""
        source = DirectoryResourceSource(resource_root)

        player.load_resource(source, "tick", "mp3", "sounds")

        assert player.is_loaded is True

    def test_load_resource_missing(self, player, resource_root):
        """Should propagate ResourceNotFoundError and stay idle."""
        source = DirectoryResourceSource(resource_root)

        with pytest.raises(ResourceNotFoundError):
            player.load_resource(source, "missing", "mp3")

        assert player.state == PlayerState.IDLE

    def test_close_releases_output(self, loaded_player, decoder, scheduler):
        """Should cancel the timer, close the output and return to idle."""
        loaded_player.play_segment(1.0, 2.0, Looping.infinite())

        loaded_player.close()

        assert loaded_player.state == PlayerState.IDLE
        assert loaded_player.is_loaded is False
        assert decoder.last.closed is True
        assert scheduler.pending == []


# =============================================================================
# Whole-File Playback Tests
# =============================================================================


class TestWholeFilePlayback:
    """Tests for play, pause, stop and natural completion."""

    def test_play_without_load_raises(self, player):
        """Should raise NotLoadedError when nothing is loaded."""
        with pytest.raises(NotLoadedError):
            player.play()

    def test_play_segment_without_load_raises(self, player):
        """Should raise NotLoadedError for segment play without a source."""
        with pytest.raises(NotLoadedError):
            player.play_segment(0.0, 1.0)

    def test_play_emits_true(self, loaded_player, decoder, events):
        """Should start the output and report playing."""
        loaded_player.number_of_loops = 1

        loaded_player.play()

        assert loaded_player.state == PlayerState.PLAYING_WHOLE
        assert loaded_player.is_playing is True
        assert decoder.last.loop_count == 1
        assert events.states == [True]

    def test_play_rejected(self, loaded_player, decoder, events):
        """Should raise PlayFailedError and not report playing."""
        decoder.last.accept_play = False

        with pytest.raises(PlayFailedError):
            loaded_player.play()

        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert events.states == []

    def test_natural_completion(self, loaded_player, decoder, events):
        """Should emit stopped then finished when the whole file ends."""
        loaded_player.play()

        decoder.last.finish()

        assert events.states == [True, False]
        assert events.finished == 1
        assert loaded_player.state == PlayerState.LOADED_STOPPED

    def test_pause_keeps_position(self, loaded_player, decoder, scheduler, events):
        """Should pause at the playhead and continue from it on play."""
        loaded_player.play()
        scheduler.advance(3.0)

        loaded_player.pause()

        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert loaded_player.current_time == pytest.approx(3.0)

        scheduler.advance(5.0)
        loaded_player.play()
        scheduler.advance(1.0)

        assert loaded_player.current_time == pytest.approx(4.0)
        assert events.states == [True, False, True]

    def test_pause_when_idle_is_noop(self, player, events):
        """Should do nothing when no source is loaded."""
        player.pause()

        assert events.states == []
        assert player.state == PlayerState.IDLE

    def test_stop_emits_false(self, loaded_player, events):
        """Should stop playback and report stopped."""
        loaded_player.play()

        loaded_player.stop()

        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert events.states == [True, False]

    def test_volume_when_unloaded(self, player):
        """Should report 1.0 when nothing is loaded."""
        player.volume = 0.4

        assert player.volume == 1.0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 0.5), (2.0, 1.0), (-1.0, 0.0)],
    )
    def test_volume_is_clamped(self, loaded_player, decoder, value, expected):
        """Should clamp volume into [0, 1]."""
        loaded_player.volume = value

        assert loaded_player.volume == expected
        assert decoder.last.volume == expected

    @pytest.mark.parametrize("value", [-2, -5])
    def test_loop_count_below_infinite_rejected(self, loaded_player, decoder, value):
        """Should reject loop counts below -1 and keep the previous count."""
        loaded_player.number_of_loops = 2

        with pytest.raises(ValueError):
            loaded_player.number_of_loops = value

        assert loaded_player.number_of_loops == 2
        assert decoder.last.loop_count == 2

    def test_infinite_loop_count_accepted(self, loaded_player, decoder):
        loaded_player.number_of_loops = -1

        assert decoder.last.loop_count == -1


# =============================================================================
# Segment Playback Tests
# =============================================================================


class TestSegmentPlayback:
    """Tests for ranged playback and its restart loop."""

    def test_single_pass(self, loaded_player, decoder, scheduler, events):
        """Should play the range once and stop after its length."""
        loaded_player.play_segment(2.0, 4.0)

        assert loaded_player.state == PlayerState.PLAYING_SEGMENT
        assert decoder.last.seeks == [2.0]
        assert scheduler.pending[0].delay == pytest.approx(2.0)

        scheduler.advance(1.9)
        assert loaded_player.is_playing is True

        scheduler.advance(0.1)
        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert loaded_player.segment is None
        assert events.states == [True, False]
        assert events.finished == 0

    def test_counted_loops(self, loaded_player, decoder, scheduler, events):
        """Should play times(2) three times in total."""
        loaded_player.play_segment(1.0, 2.0, Looping.times(2))

        scheduler.advance(2.9)
        assert loaded_player.state == PlayerState.PLAYING_SEGMENT
        assert loaded_player.segment.remaining_loops == 0

        scheduler.advance(0.1)
        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert decoder.last.seeks == [1.0, 1.0, 1.0]
        assert decoder.last.play_times == pytest.approx([100.0, 101.0, 102.0])
        assert events.states == [True, False]

    def test_times_zero_behaves_like_once(self, loaded_player, scheduler, events):
        """Should not restart for times(0)."""
        loaded_player.play_segment(1.0, 2.0, Looping.times(0))

        scheduler.advance(1.0)

        assert events.states == [True, False]

    def test_infinite_loops_until_stopped(self, loaded_player, decoder, scheduler, events):
        """Should keep restarting until stop is called."""
        loaded_player.play_segment(0.0, 0.5, Looping.infinite())

        scheduler.advance(50.0)

        assert loaded_player.state == PlayerState.PLAYING_SEGMENT
        assert loaded_player.segment.remaining_loops == INFINITE_LOOPS
        assert len(decoder.last.play_times) == 101

        loaded_player.stop()

        assert scheduler.pending == []
        assert loaded_player.segment is None
        assert events.states == [True, False]

    def test_bounds_are_clamped(self, loaded_player, decoder, scheduler):
        """Should clamp bounds to the source duration."""
        loaded_player.play_segment(-1.0, 20.0)

        assert loaded_player.segment.start == 0.0
        assert loaded_player.segment.length == pytest.approx(10.0)
        assert decoder.last.seeks == [0.0]
        assert scheduler.pending[0].delay == pytest.approx(10.0)

    @pytest.mark.parametrize(
        ("start", "end"),
        [(12.0, 15.0), (5.0, 5.0), (0.4, 0.1), (10.0, 11.0)],
    )
    def test_empty_range_rejected(self, loaded_player, decoder, events, start, end):
        """Should raise InvalidRangeError and leave the player untouched."""
        with pytest.raises(InvalidRangeError) as exc_info:
            loaded_player.play_segment(start, end)

        error = exc_info.value
        assert (error.start, error.end, error.duration) == (start, end, 10.0)
        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert decoder.last.calls == []
        assert events.states == []

    def test_output_loop_count_zeroed(self, player, decoder):
        """Should disable the output's whole-file loop during a segment."""
        player.number_of_loops = 3
        player.load(b"audio")

        player.play_segment(1.0, 2.0)
        player.number_of_loops = 5

        assert decoder.last.loop_count == 0
        assert player.number_of_loops == 5

    def test_new_segment_replaces_timer(self, loaded_player, scheduler, events):
        """Should cancel the previous segment's timer."""
        loaded_player.play_segment(0.0, 5.0)
        scheduler.advance(1.0)

        loaded_player.play_segment(6.0, 7.0)
        scheduler.advance(1.0)

        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert events.states == [True, True, False]
        assert len([t for t in scheduler.timers if t.fired]) == 1

    def test_play_segment_rejected(self, loaded_player, decoder, scheduler):
        """Should raise PlayFailedError without arming a timer."""
        decoder.last.accept_play = False

        with pytest.raises(PlayFailedError):
            loaded_player.play_segment(1.0, 2.0)

        assert loaded_player.segment is None
        assert scheduler.pending == []

    def test_restart_after_output_stopped_emits_true(self, loaded_player, decoder, scheduler, events):
        """Should report playing again when a restart revives a stopped output."""
        loaded_player.play_segment(8.0, 10.0, Looping.times(1))
        decoder.last.finish()

        assert events.finished == 0
        assert loaded_player.state == PlayerState.PLAYING_SEGMENT

        scheduler.advance(2.0)
        assert events.states == [True, True]

        scheduler.advance(2.0)
        assert events.states == [True, True, False]

    def test_play_after_stop_plays_whole_file(self, loaded_player, scheduler):
        """Should not resume a segment after stop."""
        loaded_player.play_segment(1.0, 2.0, Looping.infinite())
        loaded_player.stop()

        loaded_player.play()

        assert loaded_player.state == PlayerState.PLAYING_WHOLE
        assert scheduler.pending == []


# =============================================================================
# Drift Tests
# =============================================================================


class TestDriftFreeScheduling:
    """Tests for restart timing against the anchor."""

    def test_lateness_does_not_accumulate(self, decoder):
        """Should schedule every restart against the anchor, not the late fire."""
        scheduler = ManualScheduler(lateness=0.05)
        decoder.clock = scheduler.now
        player = SegmentPlayer(decoder, scheduler)
        player.load(b"audio")

        player.play_segment(0.0, 0.5, Looping.infinite())
        scheduler.advance(25.2)

        assert len(scheduler.fired_at) == 50
        for k, fired in enumerate(scheduler.fired_at, start=1):
            assert fired == pytest.approx(100.0 + k * 0.5 + 0.05)

    def test_stale_timer_is_ignored(self, decoder, events):
        """Should ignore a fire that races with cancellation."""
        scheduler = NonCancellingScheduler()
        decoder.clock = scheduler.now
        player = SegmentPlayer(decoder, scheduler)
        events.attach(player)
        player.load(b"audio")

        player.play_segment(0.0, 1.0, Looping.infinite())
        player.stop()
        scheduler.advance(5.0)

        assert decoder.last.calls.count("play") == 1
        assert player.state == PlayerState.LOADED_STOPPED
        assert events.states == [True, False]


# =============================================================================
# Pause and Resume Tests
# =============================================================================


class TestSegmentPauseResume:
    """Tests for pausing inside a segment cycle."""

    def test_resume_finishes_current_cycle(self, loaded_player, decoder, scheduler, events):
        """Should resume with the time left in the cycle, then loop normally."""
        loaded_player.play_segment(2.0, 4.0, Looping.times(1))
        scheduler.advance(0.5)

        loaded_player.pause()

        assert loaded_player.state == PlayerState.PAUSED_SEGMENT
        assert loaded_player.segment.paused_remaining == pytest.approx(1.5)
        assert scheduler.pending == []

        scheduler.advance(10.0)
        loaded_player.play()

        assert loaded_player.state == PlayerState.PLAYING_SEGMENT
        assert scheduler.pending[0].delay == pytest.approx(1.5)

        scheduler.advance(1.5)
        assert scheduler.pending[0].delay == pytest.approx(2.0)

        scheduler.advance(2.0)
        assert loaded_player.state == PlayerState.LOADED_STOPPED
        assert decoder.last.seeks == [2.0, 2.0]
        assert events.states == [True, False, True, False]

    def test_single_pass_segment_resumes(self, loaded_player, scheduler, events):
        """Should resume a once segment for the rest of its length."""
        loaded_player.play_segment(0.0, 4.0)
        scheduler.advance(1.0)
        loaded_player.pause()

        loaded_player.play()
        scheduler.advance(2.9)
        assert loaded_player.is_playing is True

        scheduler.advance(0.1)
        assert events.states == [True, False, True, False]

    def test_double_pause_keeps_remaining(self, loaded_player, scheduler):
        """Should keep the captured remaining time on a second pause."""
        loaded_player.play_segment(0.0, 4.0)
        scheduler.advance(1.0)
        loaded_player.pause()
        scheduler.advance(2.0)

        loaded_player.pause()

        assert loaded_player.segment.paused_remaining == pytest.approx(3.0)

    def test_resume_rejected_keeps_pause(self, loaded_player, decoder, scheduler):
        """Should stay paused so the caller can retry."""
        loaded_player.play_segment(0.0, 4.0)
        scheduler.advance(1.0)
        loaded_player.pause()
        decoder.last.accept_play = False

        with pytest.raises(PlayFailedError):
            loaded_player.play()

        assert loaded_player.state == PlayerState.PAUSED_SEGMENT
        assert loaded_player.segment.paused_remaining == pytest.approx(3.0)
        assert scheduler.pending == []


# =============================================================================
# Thread Affinity Tests
# =============================================================================


class TestControlThread:
    """Tests for control thread enforcement."""

    def _call_in_thread(self, func):
        errors = []

        def target():
            try:
                func()
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=target)
        thread.start()
        thread.join()
        return errors

    def test_foreign_thread_rejected(self, loaded_player):
        """Should raise ControlThreadError off the control thread."""
        errors = self._call_in_thread(loaded_player.play)

        assert len(errors) == 1
        assert isinstance(errors[0], ControlThreadError)
        assert errors[0].operation == "play"

    def test_enforcement_can_be_disabled(self, decoder, scheduler):
        """Should allow any thread when enforcement is off."""
        player = SegmentPlayer(
            decoder, scheduler, settings=PlayerSettings(enforce_control_thread=False)
        )
        player.load(b"audio")

        errors = self._call_in_thread(player.play)

        assert errors == []
        assert player.is_playing is True


# =============================================================================
# Real Event Loop Tests
# =============================================================================


class TestRealEventLoop:
    """Timing on a real asyncio loop."""

    @pytest.mark.asyncio
    async def test_counted_segment_total_duration(self):
        """Should stop after (n + 1) lengths."""
        loop = asyncio.get_running_loop()
        decoder = FakeDecoder(10.0, loop.time)
        player = SegmentPlayer(decoder, AsyncioScheduler(loop))
        player.load(b"audio")
        done = asyncio.Event()
        player.on_playback_state_change = lambda playing: None if playing else done.set()

        started = loop.time()
        player.play_segment(1.0, 1.05, Looping.times(3))
        await asyncio.wait_for(done.wait(), timeout=5.0)
        elapsed = loop.time() - started

        assert 0.19 <= elapsed < 0.35
        assert len(decoder.last.play_times) == 4

    @pytest.mark.asyncio
    async def test_restarts_stay_on_grid(self):
        """Should keep restart k close to anchor + k * length."""
        loop = asyncio.get_running_loop()
        decoder = FakeDecoder(10.0, loop.time)
        player = SegmentPlayer(decoder, AsyncioScheduler(loop))
        player.load(b"audio")
        length = 0.02

        player.play_segment(0.0, length, Looping.infinite())
        anchor = player.segment.anchor
        output = decoder.last

        async def wait_for_restarts():
            while len(output.play_times) < 41:
                await asyncio.sleep(0.005)

        await asyncio.wait_for(wait_for_restarts(), timeout=5.0)
        player.stop()

        for k, played in enumerate(output.play_times[:41]):
            assert played - (anchor + k * length) < 0.05

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_timer(self):
        """Should not restart after stop."""
        loop = asyncio.get_running_loop()
        decoder = FakeDecoder(10.0, loop.time)
        player = SegmentPlayer(decoder, AsyncioScheduler(loop))
        player.load(b"audio")

        player.play_segment(0.0, 0.02, Looping.infinite())
        player.stop()
        await asyncio.sleep(0.1)

        assert len(decoder.last.play_times) == 1
        assert player.state == PlayerState.LOADED_STOPPED

    @pytest.mark.asyncio
    async def test_single_pass_reports_stop_after_length(self):
        """Should report playing at once and stopped after the segment length."""
        loop = asyncio.get_running_loop()
        decoder = FakeDecoder(10.0, loop.time)
        player = SegmentPlayer(decoder, AsyncioScheduler(loop))
        player.load(b"audio")
        stopped_at = []

        def on_state_change(playing):
            if not playing:
                stopped_at.append(loop.time())

        player.on_playback_state_change = on_state_change

        started = loop.time()
        player.play_segment(0.0, 0.3, Looping.once())
        assert player.is_playing is True

        await asyncio.sleep(0.45)

        assert player.is_playing is False
        assert len(stopped_at) == 1
        assert stopped_at[0] - started >= 0.29
        assert len(decoder.last.play_times) == 1

    @pytest.mark.asyncio
    async def test_two_extra_cycles(self):
        """Should keep playing through two restarts and stop after the third cycle."""
        loop = asyncio.get_running_loop()
        decoder = FakeDecoder(10.0, loop.time)
        player = SegmentPlayer(decoder, AsyncioScheduler(loop))
        player.load(b"audio")

        player.play_segment(0.0, 0.25, Looping.times(2))
        await asyncio.sleep(0.6)
        assert player.is_playing is True

        await asyncio.sleep(0.3)
        assert player.is_playing is False
        assert len(decoder.last.play_times) == 3
