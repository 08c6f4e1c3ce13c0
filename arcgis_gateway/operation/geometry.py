"""Geometry service data contracts (simplify, buffer, project)."""

from __future__ import annotations

from dataclasses import dataclass

from .common import (
    Feature, OperationRequest, PortalResponse, SpatialReference,
    infer_geometry_type, spatial_reference_of, wire,
)


@dataclass
class GeometryCollectionRequest(OperationRequest):
    """
    Base for requests carrying a ``geometries`` collection.

    ``features`` may hold :class:`Feature` objects or bare JSON geometries;
    they are packed into ``{"geometryType": ..., "geometries": [...]}`` using
    the type of the first one.
    """

    features: list | None = None
    geometries: dict | None = wire("geometries")

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.geometries is None and self.features:
            shapes = [f.geometry if isinstance(f, Feature) else f for f in self.features]
            self.geometries = {
                "geometryType": infer_geometry_type(shapes[0]),
                "geometries": shapes,
            }

    @property
    def first_geometry(self):
        shapes = (self.geometries or {}).get("geometries") or []
        return shapes[0] if shapes else None


@dataclass
class Simplify(GeometryCollectionRequest):
    sr: SpatialReference | None = wire("sr")

    operation = "simplify"


@dataclass
class GeometryOperation(GeometryCollectionRequest):
    """
    Operations with input and output spatial references.  ``inSR`` comes from
    the first geometry and falls back to WGS84.
    """

    in_sr: SpatialReference | None = wire("inSR")
    out_sr: SpatialReference | None = wire("outSR")

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.in_sr is None and self.geometries is not None:
            first = self.first_geometry
            self.in_sr = (spatial_reference_of(first) if first else None) or SpatialReference.WGS84


@dataclass
class Buffer(GeometryOperation):
    distances: list[float] | None = wire("distances", csv=True)
    buffer_sr: SpatialReference | None = wire("bufferSR")
    unit: str | None = wire("unit")
    union_results: bool = wire("unionResults", False)

    operation = "buffer"

    def __post_init__(self) -> None:
        super().__post_init__()
        if isinstance(self.distances, (int, float)):
            self.distances = [self.distances]


@dataclass
class Project(GeometryOperation):
    operation = "project"


@dataclass
class GeometryOperationResponse(PortalResponse):
    geometries: list[dict] = wire("geometries", default_factory=list)
