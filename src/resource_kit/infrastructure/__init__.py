"""
Infrastructure Layer

Adapters implementing the application ports:
- audio/: soundfile decoding and sounddevice output
- scheduling/: asyncio timers
- resources/: filesystem resource lookup
"""

from resource_kit.infrastructure.resources.directory_source import DirectoryResourceSource
from resource_kit.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler

__all__ = [
    "AsyncioScheduler",
    "DirectoryResourceSource",
]
