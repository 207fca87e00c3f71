"""Resource source reading files below a root directory."""

from __future__ import annotations

import logging
from pathlib import Path

from resource_kit.application.interfaces.resource_source import ResourceSource
from resource_kit.domain.shared.exceptions import DataLoadingFailedError, ResourceNotFoundError
from resource_kit.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class DirectoryResourceSource(ResourceSource):
    """Resolves ``name.ext`` inside ``root`` or ``root / scope``.

    Names containing path separators are allowed, but nothing may resolve
    outside ``root``.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str, ext: str | None = None, scope: str | None = None) -> Path:
        """Return the existing file for a resource.

        Raises:
            ResourceNotFoundError: If the file does not exist or escapes the root.
        """
        base = self._root / scope if scope else self._root
        filename = f"{name}.{ext.lstrip('.')}" if ext else name
        path = (base / filename).resolve()

        if not path.is_relative_to(self._root) or not path.is_file():
            logger.debug(LogTemplates.RESOURCE_MISSING, filename, base)
            raise ResourceNotFoundError(name, ext)
        return path

    def resolve(self, name: str, ext: str | None = None, scope: str | None = None) -> bytes:
        path = self.path_for(name, ext, scope)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DataLoadingFailedError(path, e) from e
        logger.debug(LogTemplates.RESOURCE_RESOLVED, path.name, len(data))
        return data
