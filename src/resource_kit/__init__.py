"""Drift-free segment playback and JSON resource manifests."""

from resource_kit.application.services.segment_player import SegmentPlayer
from resource_kit.domain.playback.value_objects import Looping, PlayerState
from resource_kit.domain.shared.exceptions import DomainError
from resource_kit.domain.shared.json_value import JSONValue, decode_as, decode_json, encode_json

__version__ = "0.1.0"

__all__ = [
    "DomainError",
    "JSONValue",
    "Looping",
    "PlayerState",
    "SegmentPlayer",
    "decode_as",
    "decode_json",
    "encode_json",
]
