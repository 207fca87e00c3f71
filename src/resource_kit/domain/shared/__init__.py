"""
Shared Domain Kernel

Exceptions and the JSON value model shared across bounded contexts.
"""

from resource_kit.domain.shared.exceptions import (
    ControlThreadError,
    DataLoadingFailedError,
    DecodeFailedError,
    DomainError,
    InvalidRangeError,
    JSONDecodingFailedError,
    NotLoadedError,
    PlayerError,
    PlayFailedError,
    ResourceError,
    ResourceNotFoundError,
    SchemaMismatchError,
)
from resource_kit.domain.shared.json_value import (
    JSONArray,
    JSONBool,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    JSONValue,
)

__all__ = [
    "DomainError",
    "PlayerError",
    "NotLoadedError",
    "InvalidRangeError",
    "PlayFailedError",
    "DecodeFailedError",
    "ControlThreadError",
    "ResourceError",
    "ResourceNotFoundError",
    "DataLoadingFailedError",
    "JSONDecodingFailedError",
    "SchemaMismatchError",
    "JSONValue",
    "JSONNull",
    "JSONBool",
    "JSONNumber",
    "JSONString",
    "JSONArray",
    "JSONObject",
]
