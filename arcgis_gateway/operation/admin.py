"""Server administration data contracts (``<root>/admin/services/...``)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import HTTP_POST
from ..endpoint import ArcGISServerAdminEndpoint, join_path
from .common import OperationRequest, PortalResponse, list_of, wire
from .discovery import ServiceDescription

STARTED = "STARTED"
STOPPED = "STOPPED"


def service_admin_endpoint(service: ServiceDescription) -> ArcGISServerAdminEndpoint:
    """``admin/services/<folder>/<name>.<type>`` for a catalog entry."""
    return ArcGISServerAdminEndpoint(join_path("services", f"{service.name}.{service.type}"))


@dataclass
class ServiceReport(OperationRequest):
    """Report for every service in one folder; ``/`` is the root folder."""

    operation = "report"

    @classmethod
    def for_folder(cls, folder: str = "/") -> "ServiceReport":
        return cls(ArcGISServerAdminEndpoint(join_path("services", folder)))


@dataclass
class ServiceStatus(OperationRequest):
    operation = "status"

    @classmethod
    def for_service(cls, service: ServiceDescription) -> "ServiceStatus":
        return cls(service_admin_endpoint(service))


@dataclass
class StartService(OperationRequest):
    operation = "start"
    http_method = HTTP_POST

    @classmethod
    def for_service(cls, service: ServiceDescription) -> "StartService":
        return cls(service_admin_endpoint(service))


@dataclass
class StopService(OperationRequest):
    operation = "stop"
    http_method = HTTP_POST

    @classmethod
    def for_service(cls, service: ServiceDescription) -> "StopService":
        return cls(service_admin_endpoint(service))


@dataclass
class ServiceReportEntry:
    folder_name: str | None = None
    service_name: str | None = None
    type: str | None = None
    description: str | None = None
    status: dict | None = None

    @classmethod
    def from_json(cls, struct: dict) -> "ServiceReportEntry":
        return cls(
            folder_name=struct.get("folderName"),
            service_name=struct.get("serviceName"),
            type=struct.get("type"),
            description=struct.get("description"),
            status=struct.get("status"),
        )

    @property
    def real_time_state(self) -> str | None:
        return (self.status or {}).get("realTimeState")


@dataclass
class FolderReportResponse(PortalResponse):
    reports: list[ServiceReportEntry] = wire(
        "reports", default_factory=list, convert=list_of(ServiceReportEntry),
    )
    path: str = ""


@dataclass
class SiteReportResponse:
    resources: list[FolderReportResponse] = field(default_factory=list)

    @property
    def reports(self) -> list[ServiceReportEntry]:
        return [r for folder in self.resources for r in folder.reports]


@dataclass
class ServiceStatusResponse(PortalResponse):
    configured_state: str | None = wire("configuredState")
    real_time_state: str | None = wire("realTimeState")

    @property
    def running(self) -> bool:
        return self.real_time_state == STARTED

    @property
    def stopped(self) -> bool:
        return self.real_time_state == STOPPED


@dataclass
class StartStopServiceResponse(PortalResponse):
    status: str | None = wire("status")

    @property
    def succeeded(self) -> bool:
        return (self.status or "").lower() == "success"
