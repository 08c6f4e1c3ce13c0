"""
arcgis_gateway.serializer
=========================
Codec between typed request/response objects and the server's wire dialect.

Requests flatten to a ``{name: str}`` mapping usable both as a GET query
string and as a form-encoded POST body:

* ``None`` values are omitted.
* Booleans are lowercase ``true`` / ``false``.
* Nested objects (spatial references, geometries, dicts) are JSON encoded.
* Lists are comma-joined on GET and JSON arrays on POST, unless the field is
  marked ``csv`` in which case they are always comma-joined.

Responses are parsed with :mod:`json` and rebuilt through the response
type's ``from_json``; anything that does not fit raises
:class:`~arcgis_gateway.errors.SerializationError`.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Protocol, TypeVar

from .config import HTTP_GET
from .errors import SerializationError

T = TypeVar("T")


class Serializer(Protocol):
    """Capability the gateway needs from a codec."""

    def serialize(self, request, method: str = HTTP_GET) -> dict[str, str]:
        ...

    def deserialize(self, body: "str | bytes", response_type: type[T], url: str = "") -> T:
        ...


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_json"):
        return value.to_json()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    return value


def _dumps(value: Any) -> str:
    return json.dumps(_jsonable(value), separators=(",", ":"))


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _scalar(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return _dumps(value)


class JsonSerializer:
    """Default codec built on the standard :mod:`json` module."""

    def encode_value(self, value: Any, method: str = HTTP_GET, csv: bool = False) -> str:
        if isinstance(value, (list, tuple, set, frozenset)):
            if csv or method == HTTP_GET:
                return ",".join(_scalar(v) for v in value)
            return _dumps(value)
        return _scalar(value)

    def serialize(self, request, method: str = HTTP_GET) -> dict[str, str]:
        params = {}
        for f, name, value in request.wire_fields():
            if value is None:
                continue
            params[name] = self.encode_value(value, method, f.metadata.get("csv", False))
        return params

    def deserialize(self, body: "str | bytes", response_type: type[T], url: str = "") -> T:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        try:
            struct = json.loads(body)
        except ValueError as exc:
            raise SerializationError(f"Response is not valid JSON: {exc}", url, body) from exc
        if not isinstance(struct, dict):
            raise SerializationError(
                f"Expected a JSON object, got {type(struct).__name__}", url, body,
            )
        try:
            return response_type.from_json(struct)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SerializationError(
                f"Response does not fit {response_type.__name__}: {exc}", url, body,
            ) from exc
