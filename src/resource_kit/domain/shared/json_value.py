"""Type-erased JSON values.

``JSONValue`` is a closed union of six immutable node classes covering every
JSON kind. It is used for loosely structured parts of a document (resource
payloads, vendor metadata) whose schema is only known by the caller::

    value = decode_json('{"lesson": 1, "title": {"text": "hi"}}')
    lesson = decode_as(value, Lesson)

JSON numbers are always stored as ``float``; integer semantics are not
preserved. Integer fields of a target schema still accept integral floats
when re-decoded through :func:`decode_as`.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Annotated, Any, TypeVar

from pydantic import PlainSerializer, PlainValidator, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resource_kit.domain.shared.exceptions import JSONDecodingFailedError, SchemaMismatchError
from resource_kit.domain.shared.messages import ErrorMessages

T = TypeVar("T")

ROOT_PATH = "$"


class _JSONNode:
    """Behaviour shared by every JSON node class."""

    __slots__ = ()

    def to_python(self) -> Any:
        return to_python(self)  # type: ignore[arg-type]

    def encode(self) -> str:
        return encode_json(self)  # type: ignore[arg-type]

    def decode_as(self, target: type[T] | Any) -> T:
        return decode_as(self, target)  # type: ignore[arg-type]


@dataclass(frozen=True)
class JSONNull(_JSONNode):
    """A JSON ``null``."""

    def __repr__(self) -> str:
        return "JSONNull()"


@dataclass(frozen=True)
class JSONBool(_JSONNode):
    value: bool


@dataclass(frozen=True)
class JSONNumber(_JSONNode):
    """A JSON number, always held as ``float``."""

    value: float

    def __post_init__(self) -> None:
        if not isinstance(self.value, float):
            object.__setattr__(self, "value", float(self.value))
        if not math.isfinite(self.value):
            raise ValueError(ErrorMessages.NON_FINITE_NUMBER.format(value=self.value))


@dataclass(frozen=True)
class JSONString(_JSONNode):
    value: str


@dataclass(frozen=True)
class JSONArray(_JSONNode):
    items: tuple[JSONValue, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[JSONValue]:
        return iter(self.items)

    def __getitem__(self, index: int) -> JSONValue:
        return self.items[index]


@dataclass(frozen=True)
class JSONObject(_JSONNode):
    """A JSON object. Key order does not take part in equality or hashing."""

    members: Mapping[str, JSONValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JSONObject):
            return NotImplemented
        return dict(self.members) == dict(other.members)

    def __hash__(self) -> int:
        return hash(frozenset(self.members.items()))

    def __repr__(self) -> str:
        return f"JSONObject(members={dict(self.members)!r})"

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, key: object) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> JSONValue:
        return self.members[key]

    def get(self, key: str, default: JSONValue | None = None) -> JSONValue | None:
        return self.members.get(key, default)

    def keys(self) -> Iterator[str]:
        return iter(self.members)


JSONValue = JSONNull | JSONBool | JSONNumber | JSONString | JSONArray | JSONObject
"""Any JSON value."""

NULL = JSONNull()


# ── Building from parsed documents ──────────────────────────────────


def _child_path(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    if key.isidentifier():
        return f"{path}.{key}"
    return f"{path}[{json.dumps(key, ensure_ascii=False)}]"


def from_python(obj: Any, path: str = ROOT_PATH) -> JSONValue:
    """Build a JSONValue from a parsed JSON document.

    Interpretations are tried in the order null, bool, number, string,
    array, object. ``bool`` must come before numbers because it is a
    subclass of ``int``.

    Raises:
        JSONDecodingFailedError: If a node matches none of the six kinds.
            The error's ``path`` names the offending node.
    """
    if isinstance(obj, _JSONNode):
        return obj  # type: ignore[return-value]
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return JSONBool(obj)
    if isinstance(obj, (int, float)):
        # Literals such as 1e400 parse to inf, which has no JSON encoding.
        try:
            number = float(obj)
        except OverflowError as e:
            raise JSONDecodingFailedError(e, path=path) from e
        if not math.isfinite(number):
            raise JSONDecodingFailedError(
                path=path,
                message=ErrorMessages.NON_FINITE_JSON_NUMBER.format(path=path),
            )
        return JSONNumber(number)
    if isinstance(obj, str):
        return JSONString(obj)
    if isinstance(obj, (list, tuple)):
        return JSONArray(tuple(from_python(item, _child_path(path, i)) for i, item in enumerate(obj)))
    if isinstance(obj, Mapping) and all(isinstance(key, str) for key in obj):
        return JSONObject({key: from_python(item, _child_path(path, key)) for key, item in obj.items()})

    raise JSONDecodingFailedError(
        path=path,
        message=ErrorMessages.UNSUPPORTED_JSON_VALUE.format(type_name=type(obj).__name__, path=path),
    )


def _reject_constant(name: str) -> float:
    raise ValueError(f"Non-standard JSON constant {name}")


def decode_json(raw: str | bytes | bytearray) -> JSONValue:
    """Parse a JSON document into a JSONValue tree.

    Raises:
        JSONDecodingFailedError: If the document is malformed.
    """
    try:
        parsed = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        raise JSONDecodingFailedError(e, path=ROOT_PATH) from e
    return from_python(parsed)


# ── Encoding ────────────────────────────────────────────────────────


def to_python(value: JSONValue) -> Any:
    """Convert a JSONValue tree back to plain Python JSON data."""
    match value:
        case JSONNull():
            return None
        case JSONBool(value=flag):
            return flag
        case JSONNumber(value=number):
            return number
        case JSONString(value=text):
            return text
        case JSONArray(items=items):
            return [to_python(item) for item in items]
        case JSONObject(members=members):
            return {key: to_python(item) for key, item in members.items()}
    raise TypeError(f"Not a JSONValue: {value!r}")


def encode_json(value: JSONValue) -> str:
    """Serialize a JSONValue tree to a JSON document."""
    return json.dumps(to_python(value), ensure_ascii=False, allow_nan=False)


# ── Typed re-decoding ───────────────────────────────────────────────


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _target_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def decode_as(value: JSONValue, target: type[T] | Any) -> T:
    """Decode a JSONValue subtree into a concrete type.

    The subtree is re-serialized and validated against ``target``, which may
    be anything pydantic can validate: a model, a dataclass, ``list[Model]``,
    a primitive type.

    Raises:
        SchemaMismatchError: If the subtree's shape does not match ``target``.
    """
    document = encode_json(value)
    try:
        adapter = _adapter(target)
    except TypeError:
        # Unhashable targets skip the adapter cache.
        adapter = TypeAdapter(target)
    try:
        return adapter.validate_json(document)
    except PydanticValidationError as e:
        raise SchemaMismatchError(_target_name(target), e) from e


# ── Pydantic field support ──────────────────────────────────────────


def _validate_field(raw: Any) -> JSONValue:
    try:
        return from_python(raw)
    except JSONDecodingFailedError as e:
        # PlainValidator reports ValueError as a validation error.
        raise ValueError(e.message) from e


JSONValueField = Annotated[
    JSONValue,
    PlainValidator(_validate_field),
    PlainSerializer(to_python),
]
"""Model field type holding arbitrary JSON as a JSONValue."""

OptionalJSONValueField = Annotated[
    JSONValue | None,
    PlainValidator(lambda v: None if v is None else _validate_field(v)),
    PlainSerializer(lambda v: None if v is None else to_python(v)),
]
"""Like ``JSONValueField``, but a JSON ``null`` or missing value stays ``None``."""
