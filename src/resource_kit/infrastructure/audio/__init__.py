"""Audio infrastructure - soundfile decoder and sounddevice output."""

from resource_kit.infrastructure.audio.sounddevice_output import (
    OutputConfig,
    SoundDeviceOutput,
    SoundFileDecoder,
)

__all__ = [
    "OutputConfig",
    "SoundDeviceOutput",
    "SoundFileDecoder",
]
