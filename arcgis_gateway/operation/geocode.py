"""Geocode service data contracts."""

from __future__ import annotations

from dataclasses import dataclass

from .common import OperationRequest, PortalResponse, SpatialReference, list_of, wire

REVERSE_GEOCODE_DISTANCE = 100  # metres


@dataclass
class SingleInputGeocode(OperationRequest):
    """``findAddressCandidates`` for a one-line address or a suggestion key."""

    single_line: str | None = wire("SingleLine")
    magic_key: str | None = wire("magicKey")
    out_fields: list[str] | None = wire("outFields", csv=True)
    max_locations: int | None = wire("maxLocations")
    location: dict | None = wire("location")
    distance: float | None = wire("distance")
    category: str | None = wire("category")
    out_sr: SpatialReference | None = wire("outSR")
    for_storage: bool | None = wire("forStorage")

    operation = "findAddressCandidates"


@dataclass
class Candidate:
    address: str
    location: dict | None = None
    score: float | None = None
    attributes: dict | None = None
    extent: dict | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "Candidate":
        return cls(
            address=struct.get("address", ""),
            location=struct.get("location"),
            score=struct.get("score"),
            attributes=struct.get("attributes"),
            extent=struct.get("extent"),
        )


@dataclass
class SingleInputGeocodeResponse(PortalResponse):
    spatial_reference: SpatialReference | None = wire(
        "spatialReference", convert=SpatialReference.from_json,
    )
    candidates: list[Candidate] = wire("candidates", default_factory=list, convert=list_of(Candidate))

    @property
    def best(self) -> Candidate | None:
        return max(self.candidates, key=lambda c: c.score or 0, default=None)


@dataclass
class SuggestGeocode(OperationRequest):
    text: str | None = wire("text")
    location: dict | None = wire("location")
    distance: float | None = wire("distance")
    category: str | None = wire("category")
    max_suggestions: int | None = wire("maxSuggestions")

    operation = "suggest"


@dataclass
class Suggestion:
    text: str
    magic_key: str | None = None
    is_collection: bool = False

    @classmethod
    def from_json(cls, struct: dict) -> "Suggestion":
        return cls(
            text=struct.get("text", ""),
            magic_key=struct.get("magicKey"),
            is_collection=bool(struct.get("isCollection", False)),
        )


@dataclass
class SuggestGeocodeResponse(PortalResponse):
    suggestions: list[Suggestion] = wire("suggestions", default_factory=list, convert=list_of(Suggestion))


@dataclass
class ReverseGeocode(OperationRequest):
    location: dict | None = wire("location")
    distance: float = wire("distance", REVERSE_GEOCODE_DISTANCE)
    out_sr: SpatialReference | None = wire("outSR")
    lang_code: str | None = wire("langCode")
    feature_types: list[str] | None = wire("featureTypes", csv=True)

    operation = "reverseGeocode"


@dataclass
class ReverseGeocodeResponse(PortalResponse):
    address: dict | None = wire("address")
    location: dict | None = wire("location")
