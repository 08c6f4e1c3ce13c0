"""Typed request and response data contracts, one module per service area."""

from .admin import (
    FolderReportResponse, ServiceReport, ServiceReportEntry, ServiceStatus,
    ServiceStatusResponse, SiteReportResponse, StartService,
    StartStopServiceResponse, StopService,
)
from .auth import GenerateToken, GenerateTokenResponse, PublicKey, PublicKeyResponse
from .common import (
    Feature, Link, OperationRequest, PortalResponse, RawResponse,
    SpatialReference, wire,
)
from .discovery import (
    AuthInfo, DescribeFolder, DescribeLayer, DescribeService, Ping,
    ServerInfo, ServerInfoResponse, ServiceDescription,
    ServiceDescriptionDetails, ServiceLayerDescription, SiteDescription,
    SiteFolderDescription,
)
from .geocode import (
    ReverseGeocode, ReverseGeocodeResponse, SingleInputGeocode,
    SingleInputGeocodeResponse, SuggestGeocode, SuggestGeocodeResponse,
)
from .geometry import Buffer, GeometryOperationResponse, Project, Simplify
from .query import (
    ApplyEdits, ApplyEditsResponse, Find, FindResponse, Query,
    QueryForCount, QueryForCountResponse, QueryForExtent,
    QueryForExtentResponse, QueryForIds, QueryForIdsResponse, QueryResponse,
)

__all__ = [
    "ApplyEdits", "ApplyEditsResponse", "AuthInfo", "Buffer",
    "DescribeFolder", "DescribeLayer", "DescribeService", "Feature", "Find",
    "FindResponse", "FolderReportResponse", "GenerateToken",
    "GenerateTokenResponse", "GeometryOperationResponse", "Link",
    "OperationRequest", "Ping", "PortalResponse", "Project", "PublicKey",
    "PublicKeyResponse", "Query", "QueryForCount", "QueryForCountResponse",
    "QueryForExtent", "QueryForExtentResponse", "QueryForIds",
    "QueryForIdsResponse", "QueryResponse", "RawResponse", "ReverseGeocode",
    "ReverseGeocodeResponse", "ServerInfo", "ServerInfoResponse",
    "ServiceDescription", "ServiceDescriptionDetails",
    "ServiceLayerDescription", "ServiceReport", "ServiceReportEntry",
    "ServiceStatus", "ServiceStatusResponse", "Simplify",
    "SingleInputGeocode", "SingleInputGeocodeResponse", "SiteDescription",
    "SiteFolderDescription", "SiteReportResponse", "SpatialReference",
    "StartService", "StartStopServiceResponse", "StopService",
    "SuggestGeocode", "SuggestGeocodeResponse", "wire",
]
