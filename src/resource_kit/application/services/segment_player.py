"""
Segment Player

Timer-driven playback of whole files and sub-ranges of a loaded audio source.

Segment looping is implemented with one-shot timers instead of the output's
whole-file loop counter, since a sub-range loop cannot be expressed as a
whole-file loop. Each restart is scheduled against a fixed anchor
(``anchor + k * length``) so timer lateness does not accumulate over many
cycles.

All operations, timer callbacks and completion notifications must run on a
single control thread (normally the thread running the asyncio loop). The
player holds no locks.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING

from resource_kit.config.settings import PlayerSettings
from resource_kit.domain.playback.value_objects import (
    INFINITE_LOOPS,
    Looping,
    PlayerState,
    SegmentDescriptor,
)
from resource_kit.domain.shared.exceptions import (
    ControlThreadError,
    DecodeFailedError,
    InvalidRangeError,
    NotLoadedError,
    PlayFailedError,
)
from resource_kit.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ..interfaces.audio_output import AudioDecoder, AudioOutput
    from ..interfaces.resource_source import ResourceSource
    from ..interfaces.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class SegmentPlayer:
    """Plays a loaded source whole or as a looped segment.

    Example::

        player = SegmentPlayer(SoundFileDecoder(), AsyncioScheduler())
        player.load(data)
        player.play_segment(2.0, 4.0, Looping.times(3))  # [2.0, 4.0) four times

    ``on_playback_state_change`` receives ``True`` when playback starts or
    resumes and ``False`` when it pauses or stops. It may be called on every
    segment restart. ``on_playback_finished`` fires only when whole-file
    playback reaches its natural end, never for segments.
    """

    def __init__(
        self,
        decoder: AudioDecoder,
        scheduler: Scheduler,
        *,
        settings: PlayerSettings | None = None,
    ) -> None:
        self._decoder = decoder
        self._scheduler = scheduler
        self._settings = settings or PlayerSettings()

        self._output: AudioOutput | None = None
        self._state = PlayerState.IDLE
        self._segment: SegmentDescriptor | None = None

        self._timer: TimerHandle | None = None
        self._timer_generation = 0

        self._volume = self._settings.default_volume
        self._number_of_loops = self._settings.number_of_loops
        self._control_thread = threading.get_ident()

        self.on_playback_state_change: Callable[[bool], None] | None = None
        self.on_playback_finished: Callable[[], None] | None = None

    # === Properties ===

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state.is_loaded

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def segment(self) -> SegmentDescriptor | None:
        """The active segment, or None during whole-file play or when stopped."""
        return self._segment

    @property
    def duration(self) -> float:
        return self._output.duration if self._output is not None else 0.0

    @property
    def current_time(self) -> float:
        return self._output.current_time if self._output is not None else 0.0

    @property
    def volume(self) -> float:
        """Playback volume in [0.0, 1.0]; 1.0 when nothing is loaded."""
        if self._output is None:
            return 1.0
        return self._output.volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = max(0.0, min(float(value), 1.0))
        if self._output is not None:
            self._output.volume = self._volume

    @property
    def number_of_loops(self) -> int:
        """Whole-file loop count (0 once, n extra plays, -1 infinite).

        Ignored by segment playback, which runs its own restart loop.
        """
        return self._number_of_loops

    @number_of_loops.setter
    def number_of_loops(self, value: int) -> None:
        if value < INFINITE_LOOPS:
            raise ValueError(ErrorMessages.INVALID_LOOP_COUNT.format(value=value))
        self._number_of_loops = value
        if self._output is not None and self._segment is None:
            self._output.loop_count = value

    # === Loading ===

    def load(self, data: bytes) -> None:
        """Decode ``data`` and make it the current source.

        Any playback of the previous source is stopped and segment state is
        cleared. On failure the player keeps its previous source and state.

        Raises:
            DecodeFailedError: If the bytes cannot be decoded.
        """
        self._check_thread("load")
        try:
            output = self._decoder.decode(data)
        except DecodeFailedError:
            raise
        except Exception as e:
            logger.warning(LogTemplates.AUDIO_DECODE_FAILED, e)
            raise DecodeFailedError(e) from e

        was_playing = self._state.is_playing
        self._cancel_timer()
        self._segment = None
        if self._output is not None:
            self._output.set_on_finished(None)
            self._output.close()

        output.loop_count = self._number_of_loops
        output.volume = self._volume
        output.set_on_finished(self._handle_output_finished)
        self._output = output
        self._state = PlayerState.LOADED_STOPPED

        logger.info(LogTemplates.AUDIO_LOADED, output.duration)
        if was_playing:
            self._notify_state(False)

    def load_resource(
        self,
        source: ResourceSource,
        name: str,
        ext: str | None = "mp3",
        scope: str | None = None,
    ) -> None:
        """Resolve a named resource and load its bytes.

        Raises:
            ResourceNotFoundError: If the resource does not exist.
            DataLoadingFailedError: If the resource cannot be read.
            DecodeFailedError: If the bytes cannot be decoded.
        """
        self.load(source.resolve(name, ext, scope))

    def close(self) -> None:
        """Cancel timers and release the output."""
        self._cancel_timer()
        self._segment = None
        if self._output is not None:
            self._output.set_on_finished(None)
            self._output.close()
            self._output = None
        self._state = PlayerState.IDLE

    # === Whole-file playback ===

    def play(self) -> None:
        """Start playback from the current position.

        If a segment was paused mid-cycle, the segment resumes for the rest of
        that cycle and keeps looping. Otherwise the whole file plays, honouring
        ``number_of_loops``.

        Raises:
            NotLoadedError: If nothing is loaded.
            PlayFailedError: If the output rejects the start request.
        """
        self._check_thread("play")
        output = self._require_output()
        segment = self._segment

        if segment is not None and segment.paused_remaining is not None:
            if not output.play():
                logger.warning(LogTemplates.PLAYBACK_START_REJECTED)
                raise PlayFailedError()
            self._segment = segment.resumed(self._scheduler.now())
            self._state = PlayerState.PLAYING_SEGMENT
            self._arm_timer()
            logger.debug(LogTemplates.SEGMENT_RESUMED, segment.paused_remaining)
        else:
            self._cancel_timer()
            self._segment = None
            output.loop_count = self._number_of_loops
            if not output.play():
                self._state = PlayerState.LOADED_STOPPED
                logger.warning(LogTemplates.PLAYBACK_START_REJECTED)
                raise PlayFailedError()
            self._state = PlayerState.PLAYING_WHOLE
            logger.debug(LogTemplates.PLAYBACK_STARTED, self._number_of_loops)

        self._notify_state(True)

    def pause(self) -> None:
        """Pause playback, keeping the position.

        During segment playback the time left in the current cycle is kept so
        that :meth:`play` resumes the segment accurately.
        """
        self._check_thread("pause")
        output = self._output
        if output is None:
            return

        if self._segment is not None and self._state == PlayerState.PLAYING_SEGMENT:
            self._segment = self._segment.paused_at(output.current_time)
            self._state = PlayerState.PAUSED_SEGMENT
            logger.debug(LogTemplates.SEGMENT_PAUSED, self._segment.paused_remaining)
        elif self._state == PlayerState.PLAYING_WHOLE:
            self._state = PlayerState.LOADED_STOPPED
            logger.debug(LogTemplates.PLAYBACK_PAUSED, output.current_time)

        output.pause()
        self._cancel_timer()
        self._notify_state(False)

    def stop(self) -> None:
        """Stop playback and clear segment state."""
        self._check_thread("stop")
        if self._output is not None:
            self._output.stop()
            self._state = PlayerState.LOADED_STOPPED
        self._cancel_timer()
        self._segment = None
        logger.info(LogTemplates.PLAYBACK_STOPPED)
        self._notify_state(False)

    # === Segment playback ===

    def play_segment(self, start: float, end: float, loops: Looping | None = None) -> None:
        """Play ``[start, end)`` of the loaded source.

        Bounds are clamped to the source duration. Only a range that is empty
        after clamping is rejected.

        Args:
            start: Segment start in seconds.
            end: Segment end in seconds (exclusive).
            loops: ``Looping.once()`` (default), ``Looping.times(n)`` or
                ``Looping.infinite()``.

        Raises:
            NotLoadedError: If nothing is loaded.
            InvalidRangeError: If the clamped range has no length.
            PlayFailedError: If the output rejects the start request.
        """
        self._check_thread("play_segment")
        output = self._require_output()
        loops = loops or Looping.once()

        duration = output.duration
        start_clamped = max(0.0, min(start, duration))
        end_clamped = max(start_clamped, min(end, duration))
        length = end_clamped - start_clamped
        if length <= 0:
            raise InvalidRangeError(start, end, duration)
        if start_clamped != start or end_clamped != end:
            logger.debug(LogTemplates.SEGMENT_RANGE_CLAMPED, start, end, start_clamped, end_clamped)

        self._cancel_timer()
        self._segment = None

        output.stop()
        output.current_time = start_clamped
        output.loop_count = 0
        if not output.play():
            self._state = PlayerState.LOADED_STOPPED
            logger.warning(LogTemplates.PLAYBACK_START_REJECTED)
            raise PlayFailedError()

        self._segment = SegmentDescriptor(
            start=start_clamped,
            length=length,
            remaining_loops=loops.remaining_loops,
            anchor=self._scheduler.now(),
        )
        self._state = PlayerState.PLAYING_SEGMENT
        self._arm_timer()
        logger.debug(
            LogTemplates.SEGMENT_STARTED, start_clamped, end_clamped, self._segment.remaining_loops
        )
        self._notify_state(True)

    # === Timer management ===

    def _arm_timer(self) -> None:
        """Schedule the end of the current cycle relative to the anchor."""
        segment = self._segment
        if segment is None:
            return
        self._cancel_timer()
        delay = max(0.0, segment.next_fire_at - self._scheduler.now())
        self._timer = self._scheduler.call_later(
            delay, partial(self._on_segment_timer, self._timer_generation)
        )
        logger.debug(LogTemplates.TIMER_ARMED, delay)

    def _cancel_timer(self) -> None:
        self._timer_generation += 1
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None
            logger.debug(LogTemplates.TIMER_CANCELLED)

    def _on_segment_timer(self, generation: int) -> None:
        if generation != self._timer_generation:
            return
        self._timer = None

        output = self._output
        segment = self._segment
        if output is None or segment is None or self._state != PlayerState.PLAYING_SEGMENT:
            return

        if segment.has_restarts:
            was_playing = output.is_playing
            output.stop()
            output.current_time = segment.start
            if not output.play():
                logger.warning(LogTemplates.SEGMENT_RESTART_REJECTED)

            self._segment = segment.after_restart()
            self._arm_timer()
            logger.debug(
                LogTemplates.SEGMENT_RESTARTED,
                segment.start,
                self._segment.next_fire_at - self._scheduler.now(),
                self._segment.remaining_loops,
            )
            if not was_playing:
                self._notify_state(True)
        else:
            output.stop()
            self._segment = None
            self._state = PlayerState.LOADED_STOPPED
            logger.debug(LogTemplates.SEGMENT_FINISHED)
            self._notify_state(False)

    # === Output callbacks ===

    def _handle_output_finished(self) -> None:
        # Segment ends are driven by the timer, even when they coincide with
        # the end of the file.
        if self._state != PlayerState.PLAYING_WHOLE:
            return
        self._state = PlayerState.LOADED_STOPPED
        logger.info(LogTemplates.PLAYBACK_FINISHED)
        self._notify_state(False)
        if self.on_playback_finished is not None:
            self.on_playback_finished()

    # === Helpers ===

    def _require_output(self) -> AudioOutput:
        if self._output is None:
            raise NotLoadedError()
        return self._output

    def _notify_state(self, is_playing: bool) -> None:
        if self.on_playback_state_change is not None:
            self.on_playback_state_change(is_playing)

    def _check_thread(self, operation: str) -> None:
        if self._settings.enforce_control_thread and threading.get_ident() != self._control_thread:
            raise ControlThreadError(operation)
