"""
arcgis_gateway.operation.common
===============================
Building blocks shared by every request and response data contract.

Wire names are attached to dataclass fields with :func:`wire`; fields
without one (such as the endpoint) never reach the server.  Responses are
rebuilt from JSON by :meth:`PortalResponse.from_json`, which reads the same
metadata back.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar

from ..config import DEFAULT_FORMAT, FORMATS
from ..endpoint import Endpoint, resolve
from ..errors import ArcGISError, ConfigurationError


def wire(
    name: str,
    default: Any = None,
    *,
    convert: Callable[[Any], Any] | None = None,
    csv: bool = False,
    default_factory: Callable[[], Any] | None = None,
) -> Any:
    """
    Dataclass field mapped to the parameter *name* on the wire.

    *convert* rebuilds a typed value from its JSON form when a response is
    deserialized.  *csv* forces list values to a comma-separated string even
    in POST bodies (outFields and friends are never JSON arrays).
    """
    metadata = {"wire": name, "convert": convert, "csv": csv}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def list_of(cls) -> Callable[[list], list]:
    return lambda values: [cls.from_json(v) for v in values]


@dataclass(frozen=True)
class SpatialReference:
    """Spatial reference identified by its well-known ID."""

    wkid: int | None = None
    latest_wkid: int | None = None
    wkt: str | None = None

    def to_json(self) -> dict:
        if self.wkid is None and self.wkt:
            return {"wkt": self.wkt}
        struct = {"wkid": self.wkid}
        if self.latest_wkid is not None:
            struct["latestWkid"] = self.latest_wkid
        return struct

    @classmethod
    def from_json(cls, struct: dict) -> "SpatialReference":
        wkid = struct.get("wkid")
        latest = struct.get("latestWkid")
        return cls(
            wkid=int(wkid) if wkid is not None else None,
            latest_wkid=int(latest) if latest is not None else None,
            wkt=struct.get("wkt"),
        )


SpatialReference.WGS84 = SpatialReference(4326)
SpatialReference.WEB_MERCATOR = SpatialReference(102100, 3857)


_GEOMETRY_KEYS = (
    ("x", "esriGeometryPoint"),
    ("points", "esriGeometryMultipoint"),
    ("paths", "esriGeometryPolyline"),
    ("rings", "esriGeometryPolygon"),
    ("xmin", "esriGeometryEnvelope"),
)


def infer_geometry_type(geometry: Any) -> str | None:
    """Infer the esriGeometry* type name from a JSON geometry object."""
    if geometry is None:
        return None
    struct = geometry.to_json() if hasattr(geometry, "to_json") else geometry
    for key, name in _GEOMETRY_KEYS:
        if key in struct:
            return name
    return None


def spatial_reference_of(geometry: Any) -> SpatialReference | None:
    struct = geometry.to_json() if hasattr(geometry, "to_json") else geometry
    sr = (struct or {}).get("spatialReference")
    return SpatialReference.from_json(sr) if sr else None


@dataclass
class Feature:
    """A feature: attribute dictionary plus an optional JSON geometry."""

    attributes: dict = field(default_factory=dict)
    geometry: dict | None = None

    def to_json(self) -> dict:
        struct = {"attributes": self.attributes}
        if self.geometry is not None:
            struct["geometry"] = self.geometry
        return struct

    @classmethod
    def from_json(cls, struct: dict) -> "Feature":
        return cls(attributes=struct.get("attributes") or {}, geometry=struct.get("geometry"))


@dataclass
class Link:
    """Hypermedia record of how a response was fetched."""

    rel: str
    href: str
    method: str


@dataclass
class OperationRequest:
    """
    Parameters common to every ArcGIS REST operation.

    ``f`` defaults to json; ``token`` is only populated when a token is
    supplied.  The endpoint is resolved once at construction by appending the
    class's ``operation`` suffix.
    """

    endpoint: Endpoint | str | None = None
    token: Any = wire("token")
    format: str = wire("f", DEFAULT_FORMAT)
    callback: str | None = wire("callback")
    callback_html: str | None = wire("callback.html")

    operation: ClassVar[str] = ""
    requires_token: ClassVar[bool] = True
    http_method: ClassVar[str | None] = None

    def __post_init__(self) -> None:
        if self.endpoint is None:
            raise ConfigurationError(f"{type(self).__name__} requires an endpoint")
        self.endpoint = resolve(self.endpoint, self.operation)
        if self.format not in FORMATS:
            raise ConfigurationError(f"Unsupported output format {self.format!r}")
        # Token objects carry expiry and root; only the value goes on the wire.
        if self.token is not None and not isinstance(self.token, str):
            self.token = self.token.value

    def wire_fields(self):
        for f in dataclasses.fields(self):
            name = f.metadata.get("wire")
            if name is not None:
                yield f, name, getattr(self, f.name)


@dataclass
class PortalResponse:
    """
    Base response: any operation may come back with an ``error`` body.

    ``raw`` keeps the full JSON object, including keys with no typed field.
    """

    error: ArcGISError | None = wire("error", convert=ArcGISError.from_json)
    links: list[Link] | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, struct: dict):
        kwargs = {}
        for f in dataclasses.fields(cls):
            name = f.metadata.get("wire")
            if name is None or name not in struct:
                continue
            value = struct[name]
            convert = f.metadata.get("convert")
            kwargs[f.name] = convert(value) if convert and value is not None else value
        response = cls(**kwargs)
        response.raw = struct
        return response

    @property
    def ok(self) -> bool:
        return self.error is None

    def __getitem__(self, key: str) -> Any:
        return self.raw[key]

    def __contains__(self, key: str) -> bool:
        return key in self.raw


@dataclass
class RawResponse(PortalResponse):
    """Untyped response for generic GETs; inspect ``raw``."""
