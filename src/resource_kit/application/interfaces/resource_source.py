"""Port interface for resolving named resources to raw bytes."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ResourceSource(ABC):
    """Interface for locating and reading resources by name."""

    @abstractmethod
    def resolve(self, name: str, ext: str | None = None, scope: str | None = None) -> bytes:
        """Return the bytes of ``name.ext`` within ``scope``.

        Raises:
            ResourceNotFoundError: If no such resource exists.
            DataLoadingFailedError: If the resource exists but cannot be read.
        """
        ...
