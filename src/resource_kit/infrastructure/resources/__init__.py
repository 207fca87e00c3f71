"""Filesystem resource lookup."""

from resource_kit.infrastructure.resources.directory_source import DirectoryResourceSource

__all__ = ["DirectoryResourceSource"]
