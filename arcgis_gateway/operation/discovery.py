"""Data contracts for walking a server's catalog and describing its resources."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..endpoint import ArcGISServerEndpoint, join_path
from ..errors import ArcGISError
from .common import OperationRequest, PortalResponse, SpatialReference, list_of, wire


@dataclass
class Ping(OperationRequest):
    pass


@dataclass
class DescribeFolder(OperationRequest):
    """``GET <root>/rest/services/<folder>`` – lists sub-folders and services."""


@dataclass
class DescribeService(OperationRequest):
    pass


@dataclass
class DescribeLayer(OperationRequest):
    pass


@dataclass
class ServerInfo(OperationRequest):
    """``GET <root>/rest/info`` – version and security configuration."""

    requires_token = False


@dataclass
class ServiceDescription:
    """A ``{name, type}`` entry from a folder listing."""

    name: str
    type: str
    url: str | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "ServiceDescription":
        return cls(name=struct["name"], type=struct["type"], url=struct.get("url"))

    @property
    def endpoint(self) -> ArcGISServerEndpoint:
        return ArcGISServerEndpoint(join_path(self.name, self.type))

    @property
    def folder(self) -> str:
        return self.name.rpartition("/")[0]

    @property
    def service_name(self) -> str:
        return self.name.rpartition("/")[2]


@dataclass
class SiteFolderDescription(PortalResponse):
    """
    One node of a site description.

    ``path`` is filled in by the walker (``/`` for the root).  When ``error``
    is set the node was not expanded any further.
    """

    folders: list[str] = wire("folders", default_factory=list)
    services: list[ServiceDescription] = wire(
        "services", default_factory=list, convert=list_of(ServiceDescription),
    )
    current_version: float | None = wire("currentVersion", convert=float)
    path: str = ""

    @classmethod
    def failed(cls, path: str, message: str) -> "SiteFolderDescription":
        return cls(path=path, error=ArcGISError(message=message))


@dataclass
class SiteDescription:
    """Flat, depth-first ordered list of folder nodes."""

    resources: list[SiteFolderDescription] = field(default_factory=list)
    cancelled: bool = False

    @property
    def version(self) -> float | None:
        versions = [r.current_version for r in self.resources if r.current_version is not None]
        return max(versions) if versions else None

    @property
    def services(self) -> list[ServiceDescription]:
        return [s for r in self.resources if r.error is None for s in r.services]

    @property
    def errors(self) -> list[SiteFolderDescription]:
        return [r for r in self.resources if r.error is not None]

    def __iter__(self):
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)


@dataclass
class LayerReference:
    """Layer or table summary listed by a map or feature service."""

    id: int
    name: str
    parent_layer_id: int | None = None
    sub_layer_ids: list[int] | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "LayerReference":
        parent = struct.get("parentLayerId")
        return cls(
            id=int(struct["id"]),
            name=struct.get("name", ""),
            parent_layer_id=None if parent in (None, -1) else int(parent),
            sub_layer_ids=struct.get("subLayerIds"),
        )


@dataclass
class ServiceDescriptionDetails(PortalResponse):
    current_version: float | None = wire("currentVersion", convert=float)
    service_description: str | None = wire("serviceDescription")
    description: str | None = wire("description")
    map_name: str | None = wire("mapName")
    capabilities: str | None = wire("capabilities")
    copyright_text: str | None = wire("copyrightText")
    units: str | None = wire("units")
    spatial_reference: SpatialReference | None = wire(
        "spatialReference", convert=SpatialReference.from_json,
    )
    initial_extent: dict | None = wire("initialExtent")
    full_extent: dict | None = wire("fullExtent")
    layers: list[LayerReference] = wire("layers", default_factory=list, convert=list_of(LayerReference))
    tables: list[LayerReference] = wire("tables", default_factory=list, convert=list_of(LayerReference))
    service: ServiceDescription | None = None


@dataclass
class Field:
    name: str
    type: str
    alias: str | None = None
    length: int | None = None
    nullable: bool | None = None
    editable: bool | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "Field":
        return cls(
            name=struct["name"],
            type=struct["type"],
            alias=struct.get("alias"),
            length=struct.get("length"),
            nullable=struct.get("nullable"),
            editable=struct.get("editable"),
        )


@dataclass
class ServiceLayerDescription(PortalResponse):
    current_version: float | None = wire("currentVersion", convert=float)
    id: int | None = wire("id", convert=int)
    name: str | None = wire("name")
    type: str | None = wire("type")
    description: str | None = wire("description")
    geometry_type: str | None = wire("geometryType")
    display_field: str | None = wire("displayField")
    object_id_field: str | None = wire("objectIdField")
    capabilities: str | None = wire("capabilities")
    max_record_count: int | None = wire("maxRecordCount", convert=int)
    extent: dict | None = wire("extent")
    fields: list[Field] = wire("fields", default_factory=list, convert=list_of(Field))


@dataclass
class AuthInfo:
    is_token_based_security: bool = False
    token_services_url: str | None = None
    short_lived_token_validity: int | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "AuthInfo":
        return cls(
            is_token_based_security=bool(struct.get("isTokenBasedSecurity", False)),
            token_services_url=struct.get("tokenServicesUrl"),
            short_lived_token_validity=struct.get("shortLivedTokenValidity"),
        )


@dataclass
class ServerInfoResponse(PortalResponse):
    current_version: float | None = wire("currentVersion", convert=float)
    full_version: str | None = wire("fullVersion")
    owning_system_url: str | None = wire("owningSystemUrl")
    auth_info: AuthInfo | None = wire("authInfo", convert=AuthInfo.from_json)
