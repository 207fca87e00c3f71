"""Dependency Injection Container

Manages the application's dependency graph. Components are created on
first access and cached for reuse, so nothing touches the event loop or the
sound device until it is actually needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.audio_output import AudioDecoder
    from ..application.interfaces.resource_source import ResourceSource
    from ..application.interfaces.scheduler import Scheduler
    from ..application.services.manifest_loader import ManifestLoader
    from ..application.services.segment_player import SegmentPlayer
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. Overrides can be
    assigned to the private fields before first access (tests do this to
    swap in fakes).
    """

    settings: Settings

    # Infrastructure adapters
    _scheduler: Scheduler | None = None
    _decoder: AudioDecoder | None = None
    _resource_source: ResourceSource | None = None

    # Application services
    _manifest_loader: ManifestLoader | None = None
    _player: SegmentPlayer | None = None

    # === Infrastructure ===

    @property
    def scheduler(self) -> Scheduler:
        """Get the timer scheduler bound to the running event loop."""
        if self._scheduler is None:
            from ..infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler

            self._scheduler = AsyncioScheduler()
        return self._scheduler

    @property
    def decoder(self) -> AudioDecoder:
        """Get the audio decoder."""
        if self._decoder is None:
            from ..infrastructure.audio.sounddevice_output import SoundFileDecoder

            self._decoder = SoundFileDecoder()
        return self._decoder

    @property
    def resource_source(self) -> ResourceSource:
        """Get the resource source rooted at the configured directory."""
        if self._resource_source is None:
            from ..infrastructure.resources.directory_source import DirectoryResourceSource

            self._resource_source = DirectoryResourceSource(self.settings.resources.root)
        return self._resource_source

    # === Application Services ===

    @property
    def manifest_loader(self) -> ManifestLoader:
        """Get the manifest loader."""
        if self._manifest_loader is None:
            from ..application.services.manifest_loader import ManifestLoader

            self._manifest_loader = ManifestLoader(
                self.resource_source,
                extension=self.settings.resources.manifest_extension,
            )
        return self._manifest_loader

    @property
    def player(self) -> SegmentPlayer:
        """Get the segment player.

        The player binds to the thread that first accesses it.
        """
        if self._player is None:
            from ..application.services.segment_player import SegmentPlayer

            self._player = SegmentPlayer(
                self.decoder,
                self.scheduler,
                settings=self.settings.player,
            )
        return self._player

    # === Lifecycle ===

    def shutdown(self) -> None:
        """Release the player and its output stream."""
        if self._player is not None:
            try:
                self._player.close()
            except Exception as exc:
                logger.warning("Failed closing player: %r", exc)
            self._player = None


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
