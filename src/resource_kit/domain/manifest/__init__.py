"""Manifest bounded context - catalogs, packages and indexes."""

from resource_kit.domain.manifest.models import (
    CatalogPackage,
    IndexItem,
    IndexTarget,
    ResourceCatalog,
    ResourceEntity,
    ResourceIndex,
    ResourcePackage,
    TargetKind,
)

__all__ = [
    "CatalogPackage",
    "IndexItem",
    "IndexTarget",
    "ResourceCatalog",
    "ResourceEntity",
    "ResourceIndex",
    "ResourcePackage",
    "TargetKind",
]
