"""
SoundDevice Audio Output

Infrastructure component decoding audio with soundfile and playing it
through a sounddevice output stream.
"""

from __future__ import annotations

import asyncio
import io
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import soundfile as sf

from resource_kit.application.interfaces.audio_output import AudioDecoder, AudioOutput
from resource_kit.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

StreamFactory = Callable[..., Any]


def default_stream_factory(**kwargs: Any) -> Any:
    """Open a ``sounddevice.OutputStream``.

    sounddevice loads PortAudio at import time, so it is only imported once
    a stream is actually needed.
    """
    import sounddevice as sd

    return sd.OutputStream(**kwargs)


@dataclass
class OutputConfig:
    """Configuration for the output stream."""

    # Frames per callback; 0 lets PortAudio pick
    blocksize: int = 0
    latency: str | float = "low"
    device: int | str | None = None


class SoundDeviceOutput(AudioOutput):
    """A decoded source played through an output stream.

    The stream callback runs on PortAudio's thread. Position, volume and loop
    bookkeeping are shared with it under a lock. Natural completion is handed
    back to the event loop with ``call_soon_threadsafe`` so the finished
    callback runs on the control thread.
    """

    def __init__(
        self,
        frames: np.ndarray,
        samplerate: int,
        *,
        config: OutputConfig | None = None,
        stream_factory: StreamFactory | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the output.

        Args:
            frames: float32 samples shaped ``(frames, channels)``.
            samplerate: Sample rate in Hz.
            config: Output stream configuration.
            stream_factory: Callable creating the output stream.
            loop: Event loop receiving completion notifications. Defaults to
                the loop running when playback starts.
        """
        if frames.ndim == 1:
            frames = frames.reshape(-1, 1)
        self._frames = frames.astype(np.float32, copy=False)
        self._samplerate = samplerate
        self._config = config or OutputConfig()
        self._stream_factory = stream_factory or default_stream_factory
        self._loop = loop

        self._lock = threading.Lock()
        self._stream: Any = None
        self._position = 0
        self._volume = 1.0
        self._loop_count = 0
        self._loops_left = 0
        self._playing = False
        self._drained = False
        self._play_token = 0

        self._on_finished: Callable[[], None] | None = None

    # === Properties ===

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def channels(self) -> int:
        return self._frames.shape[1]

    @property
    def samplerate(self) -> int:
        return self._samplerate

    @property
    def duration(self) -> float:
        return self.frame_count / self._samplerate

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._position / self._samplerate

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        position = int(round(max(0.0, seconds) * self._samplerate))
        with self._lock:
            self._position = min(position, self.frame_count)

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        with self._lock:
            self._volume = max(0.0, min(float(value), 1.0))

    @property
    def loop_count(self) -> int:
        return self._loop_count

    @loop_count.setter
    def loop_count(self, value: int) -> None:
        with self._lock:
            self._loop_count = value
            self._loops_left = value

    def set_on_finished(self, callback: Callable[[], None] | None) -> None:
        self._on_finished = callback

    # === Transport ===

    def play(self) -> bool:
        if self._playing:
            return True
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._loop = None

        with self._lock:
            if self._position >= self.frame_count:
                self._position = 0
            self._drained = False
            self._play_token += 1

        try:
            if self._stream is None:
                self._stream = self._open_stream()
            if not self._stream.active:
                self._stream.start()
        except Exception as e:
            logger.error(LogTemplates.OUTPUT_START_FAILED, e)
            return False

        self._playing = True
        return True

    def pause(self) -> None:
        self._halt()

    def stop(self) -> None:
        self._halt()
        with self._lock:
            self._loops_left = self._loop_count

    def close(self) -> None:
        self._halt()
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.close()
                logger.debug(LogTemplates.OUTPUT_STREAM_CLOSED)
            except Exception as e:
                logger.debug(LogTemplates.OUTPUT_STREAM_CLOSE_ERROR, e)

    def _halt(self) -> None:
        with self._lock:
            self._play_token += 1
        if self._stream is not None and self._stream.active:
            self._stream.stop()
        self._playing = False

    def _open_stream(self) -> Any:
        stream = self._stream_factory(
            samplerate=self._samplerate,
            channels=self.channels,
            dtype="float32",
            blocksize=self._config.blocksize,
            latency=self._config.latency,
            device=self._config.device,
            callback=self._render,
        )
        logger.debug(LogTemplates.OUTPUT_STREAM_OPENED, self._samplerate, self.channels)
        return stream

    # === Stream callback (audio thread) ===

    def _render(self, outdata: np.ndarray, frames: int, time: Any, status: Any) -> None:
        if status:
            logger.debug(LogTemplates.OUTPUT_STREAM_STATUS, status)

        finished_token: int | None = None
        with self._lock:
            if self._drained:
                outdata.fill(0)
                return
            filled = 0
            total = self.frame_count
            while filled < frames:
                take = min(frames - filled, total - self._position)
                if take > 0:
                    chunk = self._frames[self._position : self._position + take]
                    outdata[filled : filled + take] = chunk * self._volume
                    self._position += take
                    filled += take
                if self._position < total:
                    continue
                if self._loops_left != 0 and total > 0:
                    if self._loops_left > 0:
                        self._loops_left -= 1
                    self._position = 0
                    continue
                outdata[filled:] = 0
                self._drained = True
                finished_token = self._play_token
                break

        if finished_token is not None:
            self._dispatch_finished(finished_token)

    def _dispatch_finished(self, token: int) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._finish, token)
        else:
            # Still on the audio thread, where the stream must not be stopped.
            # It keeps rendering silence until the next transport call.
            self._finish(token, halt_stream=False)

    def _finish(self, token: int, halt_stream: bool = True) -> None:
        # A pause, stop or seek-and-play since the callback ran supersedes it.
        if token != self._play_token or not self._playing:
            return
        if halt_stream:
            self._halt()
        else:
            self._playing = False
        with self._lock:
            self._loops_left = self._loop_count
        if self._on_finished is not None:
            self._on_finished()


class SoundFileDecoder(AudioDecoder):
    """Decodes any format libsndfile supports (WAV, FLAC, OGG, MP3, ...)."""

    def __init__(
        self,
        *,
        config: OutputConfig | None = None,
        stream_factory: StreamFactory | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._stream_factory = stream_factory
        self._loop = loop

    def decode(self, data: bytes) -> SoundDeviceOutput:
        with sf.SoundFile(io.BytesIO(data)) as f:
            frames = f.read(dtype="float32", always_2d=True)
            samplerate = f.samplerate
        return SoundDeviceOutput(
            frames,
            samplerate,
            config=self._config,
            stream_factory=self._stream_factory,
            loop=self._loop,
        )
