"""
Domain Layer

Pure logic organized by bounded contexts:
- shared/: Exceptions, messages, constrained types and the JSON value model
- playback/: Player state, looping and segment value objects
- manifest/: Catalog, package and index manifest models
"""

from resource_kit.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
