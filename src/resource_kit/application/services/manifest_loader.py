"""Loading and decoding JSON manifests from a resource source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resource_kit.domain.manifest.models import ResourceCatalog, ResourceIndex, ResourcePackage
from resource_kit.domain.shared.exceptions import JSONDecodingFailedError
from resource_kit.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.resource_source import ResourceSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


def decode_document(data: bytes | str, model: type[T] | Any) -> T:
    """Decode JSON data into ``model``.

    ``model`` may be anything pydantic can validate. Both malformed JSON and
    documents that do not match the model raise the same error.

    Raises:
        JSONDecodingFailedError: Wrapping the underlying parse or validation error.
    """
    try:
        return TypeAdapter(model).validate_json(data)
    except PydanticValidationError as e:
        raise JSONDecodingFailedError(e) from e


class ManifestLoader:
    """Loads manifests by name through a :class:`ResourceSource`."""

    def __init__(self, source: ResourceSource, *, extension: str = "json") -> None:
        self._source = source
        self._extension = extension

    def load(self, name: str, model: type[T] | Any, *, scope: str | None = None) -> T:
        """Resolve ``name`` and decode it into ``model``.

        Raises:
            ResourceNotFoundError: If the manifest does not exist.
            DataLoadingFailedError: If the manifest cannot be read.
            JSONDecodingFailedError: If the manifest is not valid for ``model``.
        """
        data = self._source.resolve(name, self._extension, scope)
        result = decode_document(data, model)
        logger.debug(LogTemplates.MANIFEST_LOADED, getattr(model, "__name__", model), name)
        return result

    def load_catalog(self, name: str, *, scope: str | None = None) -> ResourceCatalog:
        return self.load(name, ResourceCatalog, scope=scope)

    def load_package(self, name: str, *, scope: str | None = None) -> ResourcePackage:
        return self.load(name, ResourcePackage, scope=scope)

    def load_index(self, name: str, *, scope: str | None = None) -> ResourceIndex:
        return self.load(name, ResourceIndex, scope=scope)
