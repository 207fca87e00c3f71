"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters.
"""

from resource_kit.application.interfaces.audio_output import AudioDecoder, AudioOutput
from resource_kit.application.interfaces.resource_source import ResourceSource
from resource_kit.application.interfaces.scheduler import Scheduler, TimerHandle

__all__ = [
    "AudioDecoder",
    "AudioOutput",
    "ResourceSource",
    "Scheduler",
    "TimerHandle",
]
