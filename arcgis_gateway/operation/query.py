"""Feature layer query, find and edit data contracts."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import HTTP_POST
from ..errors import ArcGISError
from .common import (
    Feature, OperationRequest, PortalResponse, SpatialReference,
    infer_geometry_type, list_of, wire,
)

SPATIAL_REL_INTERSECTS = "esriSpatialRelIntersects"


@dataclass
class Query(OperationRequest):
    """
    ``<layer>/query``.  ``where`` defaults to ``1=1`` (every feature) and all
    fields are returned unless ``out_fields`` says otherwise.
    """

    where: str | None = wire("where", "1=1")
    object_ids: list[int] | None = wire("objectIds", csv=True)
    geometry: dict | None = wire("geometry")
    geometry_type: str | None = wire("geometryType")
    spatial_rel: str | None = wire("spatialRel")
    in_sr: SpatialReference | None = wire("inSR")
    out_sr: SpatialReference | None = wire("outSR")
    out_fields: list[str] | None = wire("outFields", default_factory=lambda: ["*"], csv=True)
    order_by_fields: list[str] | None = wire("orderByFields", csv=True)
    group_by_fields_for_statistics: list[str] | None = wire("groupByFieldsForStatistics", csv=True)
    result_offset: int | None = wire("resultOffset")
    result_record_count: int | None = wire("resultRecordCount")
    time: str | None = wire("time")
    distance: float | None = wire("distance")
    units: str | None = wire("units")
    max_allowable_offset: float | None = wire("maxAllowableOffset")
    geometry_precision: int | None = wire("geometryPrecision")
    return_geometry: bool = wire("returnGeometry", True)
    return_z: bool | None = wire("returnZ")
    return_m: bool | None = wire("returnM")
    return_distinct_values: bool | None = wire("returnDistinctValues")
    return_ids_only: bool | None = wire("returnIdsOnly")
    return_count_only: bool | None = wire("returnCountOnly")
    return_extent_only: bool | None = wire("returnExtentOnly")

    operation = "query"

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.geometry is not None:
            self.geometry_type = self.geometry_type or infer_geometry_type(self.geometry)
            self.spatial_rel = self.spatial_rel or SPATIAL_REL_INTERSECTS


@dataclass
class QueryForCount(Query):
    return_geometry: bool = wire("returnGeometry", False)
    return_count_only: bool | None = wire("returnCountOnly", True)


@dataclass
class QueryForIds(Query):
    return_geometry: bool = wire("returnGeometry", False)
    return_ids_only: bool | None = wire("returnIdsOnly", True)


@dataclass
class QueryForExtent(Query):
    return_geometry: bool = wire("returnGeometry", False)
    return_count_only: bool | None = wire("returnCountOnly", True)
    return_extent_only: bool | None = wire("returnExtentOnly", True)


@dataclass
class LayerField:
    name: str
    type: str | None = None
    alias: str | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "LayerField":
        return cls(name=struct["name"], type=struct.get("type"), alias=struct.get("alias"))


@dataclass
class QueryResponse(PortalResponse):
    object_id_field_name: str | None = wire("objectIdFieldName")
    global_id_field_name: str | None = wire("globalIdFieldName")
    geometry_type: str | None = wire("geometryType")
    spatial_reference: SpatialReference | None = wire(
        "spatialReference", convert=SpatialReference.from_json,
    )
    fields: list[LayerField] = wire("fields", default_factory=list, convert=list_of(LayerField))
    features: list[Feature] = wire("features", default_factory=list, convert=list_of(Feature))
    exceeded_transfer_limit: bool = wire("exceededTransferLimit", False)


@dataclass
class QueryForCountResponse(PortalResponse):
    count: int | None = wire("count", convert=int)


@dataclass
class QueryForIdsResponse(PortalResponse):
    object_id_field_name: str | None = wire("objectIdFieldName")
    object_ids: list[int] = wire("objectIds", default_factory=list)


@dataclass
class QueryForExtentResponse(PortalResponse):
    count: int | None = wire("count", convert=int)
    extent: dict | None = wire("extent")


@dataclass
class Find(OperationRequest):
    """``<map service>/find`` – text search across layers."""

    search_text: str | None = wire("searchText")
    contains: bool = wire("contains", True)
    search_fields: list[str] | None = wire("searchFields", csv=True)
    layers: list[int] | None = wire("layers", csv=True)
    sr: SpatialReference | None = wire("sr")
    layer_defs: dict | None = wire("layerDefs")
    return_geometry: bool = wire("returnGeometry", True)
    max_allowable_offset: float | None = wire("maxAllowableOffset")
    return_z: bool | None = wire("returnZ")
    return_m: bool | None = wire("returnM")

    operation = "find"


@dataclass
class FindResult:
    layer_id: int
    layer_name: str | None = None
    display_field_name: str | None = None
    found_field_name: str | None = None
    value: str | None = None
    attributes: dict | None = None
    geometry_type: str | None = None
    geometry: dict | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "FindResult":
        return cls(
            layer_id=int(struct["layerId"]),
            layer_name=struct.get("layerName"),
            display_field_name=struct.get("displayFieldName"),
            found_field_name=struct.get("foundFieldName"),
            value=struct.get("value"),
            attributes=struct.get("attributes"),
            geometry_type=struct.get("geometryType"),
            geometry=struct.get("geometry"),
        )


@dataclass
class FindResponse(PortalResponse):
    results: list[FindResult] = wire("results", default_factory=list, convert=list_of(FindResult))


@dataclass
class ApplyEdits(OperationRequest):
    """``<layer>/applyEdits``; always posted since feature payloads are large."""

    adds: list[Feature] | None = wire("adds")
    updates: list[Feature] | None = wire("updates")
    deletes: list[int] | None = wire("deletes", csv=True)
    rollback_on_failure: bool | None = wire("rollbackOnFailure")
    gdb_version: str | None = wire("gdbVersion")

    operation = "applyEdits"
    http_method = HTTP_POST


@dataclass
class EditResult:
    object_id: int | None = None
    global_id: str | None = None
    success: bool = False
    error: ArcGISError | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "EditResult":
        error = struct.get("error")
        return cls(
            object_id=struct.get("objectId"),
            global_id=struct.get("globalId"),
            success=bool(struct.get("success", False)),
            error=ArcGISError.from_json(error) if error else None,
        )


@dataclass
class ApplyEditsResponse(PortalResponse):
    add_results: list[EditResult] = wire("addResults", default_factory=list, convert=list_of(EditResult))
    update_results: list[EditResult] = wire("updateResults", default_factory=list, convert=list_of(EditResult))
    delete_results: list[EditResult] = wire("deleteResults", default_factory=list, convert=list_of(EditResult))

    @property
    def failures(self) -> list[EditResult]:
        return [r for r in self.add_results + self.update_results + self.delete_results if not r.success]
