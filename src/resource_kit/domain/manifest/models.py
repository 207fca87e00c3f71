"""Manifest models describing where resources live.

A ``ResourceCatalog`` lists packages, a ``ResourcePackage`` maps stable keys
to files, and a ``ResourceIndex`` lists items with an optional free-form
payload. Unknown keys are ignored everywhere so newer manifests still load
with older code.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resource_kit.domain.shared.json_value import OptionalJSONValueField, decode_as

T = TypeVar("T")


class ManifestModel(BaseModel):
    """Base configuration shared by all manifest records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ── Catalog ─────────────────────────────────────────────────────────


class CatalogPackage(ManifestModel):
    """A package entry in a catalog.

    ``path`` uses the same semantics as ``ResourcePackage.path``:
    root-relative, filesystem-absolute, or a remote URL.
    """

    id: str
    path: str


class ResourceCatalog(ManifestModel):
    """Entry point listing the packages available to an application."""

    schema_version: int = Field(alias="schema")
    catalog_id: str
    version: str
    packages: tuple[CatalogPackage, ...]

    def package(self, package_id: str) -> CatalogPackage | None:
        return next((p for p in self.packages if p.id == package_id), None)


# ── Package ─────────────────────────────────────────────────────────


class ResourceEntity(ManifestModel):
    """A stable key and the file it refers to, relative to the package path."""

    key: str
    file: str


class ResourcePackage(ManifestModel):
    """A group of resources resolved and loaded together."""

    schema_version: int = Field(alias="schema")
    package_id: str
    version: str
    path: str
    resources: tuple[ResourceEntity, ...]

    def resource(self, key: str) -> ResourceEntity | None:
        return next((r for r in self.resources if r.key == key), None)


# ── Index ───────────────────────────────────────────────────────────


class TargetKind(str, Enum):
    """Supported target kinds."""

    RESOURCE = "resource"


class IndexTarget(ManifestModel):
    """Reference a loading layer maps to a concrete resource."""

    kind: TargetKind
    ref: str


class IndexItem(ManifestModel):
    """A single entry of a ``ResourceIndex``.

    ``payload`` is the extension point for lightweight metadata owned by the
    index format (a display title, a level, tags). It is kept as a JSON
    value and decoded on demand with :meth:`decode_payload`.
    """

    id: str
    order: int | None = None
    target: IndexTarget
    payload: OptionalJSONValueField = None

    def decode_payload(self, target: type[T] | Any) -> T | None:
        """Decode ``payload`` into ``target``, or return None if there is none.

        Raises:
            SchemaMismatchError: If the payload does not match ``target``.
        """
        if self.payload is None:
            return None
        return decode_as(self.payload, target)


class ResourceIndex(ManifestModel):
    """A collection of resources with previews and ordering hints."""

    schema_version: int = Field(alias="schema")
    title: str
    set_id: str
    version: str
    items: tuple[IndexItem, ...]

    def item(self, item_id: str) -> IndexItem | None:
        return next((i for i in self.items if i.id == item_id), None)

    def sorted_items(self) -> list[IndexItem]:
        """Items by ``order``; unordered items keep their position at the end."""
        ordered = [i for i in self.items if i.order is not None]
        unordered = [i for i in self.items if i.order is None]
        return sorted(ordered, key=lambda i: i.order) + unordered
