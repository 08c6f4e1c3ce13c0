"""
arcgis_gateway.gateway
======================
:class:`PortalGateway` runs one logical call against an ArcGIS Server site:

  resolve endpoint -> attach token / format -> choose GET or POST -> send ->
  deserialize -> return the typed response

GET is used unless the fully encoded URL would be longer than
``MAX_GET_URL_LENGTH``, in which case the same fields are posted as a form
body.  Errors embedded by the server in an HTTP 200 body come back on
``response.error``; transport, parse, configuration and authentication
failures raise (see :mod:`arcgis_gateway.errors`).
"""

from __future__ import annotations

import threading
from typing import TypeVar

import requests

from .config import (
    HTTP_GET, HTTP_POST, INFO_PATH, INVALID_TOKEN_CODES, MAX_GET_URL_LENGTH,
    REQUEST_TIMEOUT,
)
from .endpoint import AbsoluteEndpoint, as_endpoint, join_url, normalize_root
from .errors import ConfigurationError
from .logging_setup import log
from .operation import (
    ApplyEdits, ApplyEditsResponse, Buffer, DescribeFolder, DescribeLayer,
    DescribeService, Find, FindResponse, FolderReportResponse,
    GeometryOperationResponse, Link, OperationRequest, Ping, PortalResponse,
    Project, Query, QueryForCount, QueryForCountResponse, QueryForExtent,
    QueryForExtentResponse, QueryForIds, QueryForIdsResponse, QueryResponse,
    RawResponse, ReverseGeocode, ReverseGeocodeResponse, ServerInfo,
    ServerInfoResponse, ServiceDescription, ServiceDescriptionDetails,
    ServiceLayerDescription, ServiceReport, ServiceStatus,
    ServiceStatusResponse, Simplify, SingleInputGeocode,
    SingleInputGeocodeResponse, SiteDescription, SiteFolderDescription,
    SiteReportResponse, StartService, StartStopServiceResponse, StopService,
    SuggestGeocode, SuggestGeocodeResponse,
)
from .serializer import JsonSerializer
from .session import build_session
from .transport import check_cancelled, send
from .walker import SiteWalker

R = TypeVar("R", bound=PortalResponse)


class PortalGateway:
    """
    Typed client for one ArcGIS Server root, e.g.
    ``PortalGateway("https://sampleserver6.arcgisonline.com/arcgis")``.

    *token_provider* is consulted for every request whose type needs a token
    and that carries none of its own; without one, requests go out
    anonymously.
    """

    def __init__(
        self,
        root_url: str,
        serializer=None,
        token_provider=None,
        session: requests.Session | None = None,
        include_hypermedia: bool = False,
        timeout: float = REQUEST_TIMEOUT,
        max_get_url_length: int = MAX_GET_URL_LENGTH,
    ):
        self.root_url = normalize_root(root_url)
        self.serializer = serializer or JsonSerializer()
        self.token_provider = token_provider
        self.session = session or build_session()
        self.include_hypermedia = include_hypermedia
        self.timeout = timeout
        self.max_get_url_length = max_get_url_length

    def __repr__(self) -> str:
        return f"<PortalGateway {self.root_url}>"

    # ------------------------------------------------------------------
    # Core pipeline
    # ------------------------------------------------------------------

    def _token_for(self, request: OperationRequest, cancel: threading.Event | None):
        if not request.requires_token or request.token or self.token_provider is None:
            return None
        scope = request.endpoint.root_url(self.root_url)
        return self.token_provider.get_token(scope, cancel=cancel)

    def _get_url(self, url: str, params: dict) -> str:
        return requests.Request(HTTP_GET, url, params=params).prepare().url

    def _params(self, request: OperationRequest, method: str, token) -> dict:
        params = self.serializer.serialize(request, method)
        if token is not None:
            params["token"] = str(token)
        return params

    def prepare(self, request: OperationRequest, method: str | None = None,
                token=None) -> tuple[str, dict, str]:
        """
        Return ``(url, params, method)`` exactly as :meth:`execute` would
        send them, without touching the network.
        """
        url = request.endpoint.build_absolute_url(self.root_url)
        method = method or request.http_method
        if method is None:
            params = self._params(request, HTTP_GET, token)
            length = len(self._get_url(url, params))
            if length <= self.max_get_url_length:
                return url, params, HTTP_GET
            log.debug("GET URL for %s is %d characters; posting instead", url, length)
            method = HTTP_POST
        return url, self._params(request, method, token), method

    def execute(
        self,
        request: OperationRequest,
        response_type: type[R] = RawResponse,
        method: str | None = None,
        cancel: threading.Event | None = None,
    ) -> R:
        if request is None:
            raise ConfigurationError("A request is required")
        check_cancelled(cancel)

        token = self._token_for(request, cancel)
        url, params, method = self.prepare(request, method, token)

        check_cancelled(cancel)
        log.debug("%s %s", method, url)
        body = send(self.session, method, url, params, self.timeout)
        response = self.serializer.deserialize(body, response_type, url)

        if response.error is not None:
            log.warning("%s returned %s", url, response.error)
            if token is not None and response.error.code in INVALID_TOKEN_CODES:
                self.token_provider.invalidate(token.root_url or request.endpoint.root_url(self.root_url))

        if self.include_hypermedia:
            public = {k: v for k, v in params.items() if k != "token"}
            href = self._get_url(url, public) if method == HTTP_GET else url
            response.links = [Link(rel="self", href=href, method=method)]
        return response

    def get(self, endpoint, response_type: type[R] = RawResponse,
            cancel: threading.Event | None = None) -> R:
        """GET any resource; the untyped JSON object is on ``response.raw``."""
        return self.execute(OperationRequest(as_endpoint(endpoint)), response_type, HTTP_GET, cancel)

    def post(self, request: OperationRequest, response_type: type[R] = RawResponse,
             cancel: threading.Event | None = None) -> R:
        return self.execute(request, response_type, HTTP_POST, cancel)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def ping(self, endpoint="", cancel: threading.Event | None = None) -> PortalResponse:
        return self.execute(Ping(as_endpoint(endpoint)), PortalResponse, HTTP_GET, cancel)

    def info(self, cancel: threading.Event | None = None) -> ServerInfoResponse:
        request = ServerInfo(AbsoluteEndpoint(join_url(self.root_url, INFO_PATH)))
        return self.execute(request, ServerInfoResponse, HTTP_GET, cancel)

    def describe_folder(self, path: str = "/", cancel: threading.Event | None = None) -> SiteFolderDescription:
        response = self.execute(DescribeFolder(path), SiteFolderDescription, HTTP_GET, cancel)
        response.path = "/" + path.strip("/")
        return response

    def describe_site(self, cancel: threading.Event | None = None, progress: bool = False) -> SiteDescription:
        return SiteWalker(self, progress=progress).describe_site(cancel)

    def describe_services(self, services, cancel: threading.Event | None = None) -> list[ServiceDescriptionDetails]:
        return SiteWalker(self).describe_services(services, cancel)

    def describe_service(self, endpoint, cancel: threading.Event | None = None) -> ServiceDescriptionDetails:
        if isinstance(endpoint, ServiceDescription):
            response = self.execute(DescribeService(endpoint.endpoint), ServiceDescriptionDetails,
                                    HTTP_GET, cancel)
            response.service = endpoint
            return response
        return self.execute(DescribeService(as_endpoint(endpoint)), ServiceDescriptionDetails,
                            HTTP_GET, cancel)

    def describe_layer(self, endpoint, cancel: threading.Event | None = None) -> ServiceLayerDescription:
        return self.execute(DescribeLayer(as_endpoint(endpoint)), ServiceLayerDescription, HTTP_GET, cancel)

    # ------------------------------------------------------------------
    # Feature services
    # ------------------------------------------------------------------

    def query(self, query: Query, cancel: threading.Event | None = None) -> QueryResponse:
        return self.execute(query, QueryResponse, cancel=cancel)

    def query_for_count(self, query: QueryForCount, cancel: threading.Event | None = None) -> QueryForCountResponse:
        return self.execute(query, QueryForCountResponse, cancel=cancel)

    def query_for_ids(self, query: QueryForIds, cancel: threading.Event | None = None) -> QueryForIdsResponse:
        return self.execute(query, QueryForIdsResponse, cancel=cancel)

    def query_for_extent(self, query: QueryForExtent,
                         cancel: threading.Event | None = None) -> QueryForExtentResponse:
        return self.execute(query, QueryForExtentResponse, cancel=cancel)

    def find(self, find: Find, cancel: threading.Event | None = None) -> FindResponse:
        return self.execute(find, FindResponse, cancel=cancel)

    def apply_edits(self, edits: ApplyEdits, cancel: threading.Event | None = None) -> ApplyEditsResponse:
        return self.execute(edits, ApplyEditsResponse, HTTP_POST, cancel)

    # ------------------------------------------------------------------
    # Geocoding
    # ------------------------------------------------------------------

    def geocode(self, geocode: SingleInputGeocode,
                cancel: threading.Event | None = None) -> SingleInputGeocodeResponse:
        return self.execute(geocode, SingleInputGeocodeResponse, cancel=cancel)

    def suggest(self, suggest: SuggestGeocode, cancel: threading.Event | None = None) -> SuggestGeocodeResponse:
        return self.execute(suggest, SuggestGeocodeResponse, cancel=cancel)

    def reverse_geocode(self, reverse: ReverseGeocode,
                        cancel: threading.Event | None = None) -> ReverseGeocodeResponse:
        return self.execute(reverse, ReverseGeocodeResponse, cancel=cancel)

    # ------------------------------------------------------------------
    # Geometry service
    # ------------------------------------------------------------------

    def simplify(self, simplify: Simplify, cancel: threading.Event | None = None) -> GeometryOperationResponse:
        return self.execute(simplify, GeometryOperationResponse, cancel=cancel)

    def buffer(self, buffer: Buffer, cancel: threading.Event | None = None) -> GeometryOperationResponse:
        return self.execute(buffer, GeometryOperationResponse, cancel=cancel)

    def project(self, project: Project, cancel: threading.Event | None = None) -> GeometryOperationResponse:
        return self.execute(project, GeometryOperationResponse, cancel=cancel)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def site_report(self, path: str = "", cancel: threading.Event | None = None) -> SiteReportResponse:
        """
        Service reports for one folder, or for the root and every top-level
        folder when *path* is empty.  Stops early if *cancel* is set.
        """
        if path and path.strip("/"):
            folders = [path]
        else:
            root = self.describe_folder("/", cancel)
            folders = ["/"] + list(root.folders)

        result = SiteReportResponse()
        for folder in folders:
            if cancel is not None and cancel.is_set():
                log.info("Site report cancelled after %d folder(s)", len(result.resources))
                break
            report = self.execute(ServiceReport.for_folder(folder), FolderReportResponse, HTTP_GET, cancel)
            report.path = "/" + folder.strip("/")
            result.resources.append(report)
        return result

    def service_status(self, service: ServiceDescription,
                       cancel: threading.Event | None = None) -> ServiceStatusResponse:
        return self.execute(ServiceStatus.for_service(service), ServiceStatusResponse, HTTP_GET, cancel)

    def start_service(self, service: ServiceDescription,
                      cancel: threading.Event | None = None) -> StartStopServiceResponse:
        return self.execute(StartService.for_service(service), StartStopServiceResponse, HTTP_POST, cancel)

    def stop_service(self, service: ServiceDescription,
                     cancel: threading.Event | None = None) -> StartStopServiceResponse:
        return self.execute(StopService.for_service(service), StartStopServiceResponse, HTTP_POST, cancel)
