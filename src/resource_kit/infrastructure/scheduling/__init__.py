"""Timer scheduling on the asyncio event loop."""

from resource_kit.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler

__all__ = ["AsyncioScheduler"]
