"""
arcgis_gateway.errors
=====================
Failure categories raised by the gateway, and the error object servers embed
in otherwise successful responses.

Every exception carries an :class:`ErrorKind` so callers can tell connectivity
problems from schema drift or credential rejection without matching on class
names.  Domain errors are never raised: they arrive as
:class:`ArcGISError` on ``response.error``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class ErrorKind(enum.Enum):
    CONFIGURATION  = "configuration"
    TRANSPORT      = "transport"
    SERIALIZATION  = "serialization"
    DOMAIN         = "domain"
    AUTHENTICATION = "authentication"
    CANCELLED      = "cancelled"


@dataclass
class ArcGISError:
    """Error body returned inside an HTTP 200 response."""

    message: str = ""
    details: list[str] = field(default_factory=list)
    code: int | None = None

    kind = ErrorKind.DOMAIN

    @classmethod
    def from_json(cls, struct: dict) -> "ArcGISError":
        details = struct.get("details") or []
        if isinstance(details, str):
            details = [details]
        code = struct.get("code")
        return cls(
            message=struct.get("message") or "",
            details=[str(d) for d in details],
            code=int(code) if code is not None else None,
        )

    def __str__(self) -> str:
        text = f"ERROR {self.code}: {self.message or 'Unspecified'}"
        if self.details:
            text += " -- " + ", ".join(self.details)
        return text


class ArcGISGatewayError(Exception):
    """Base class for every failure the gateway raises."""

    kind: ErrorKind = ErrorKind.CONFIGURATION


class ConfigurationError(ArcGISGatewayError, ValueError):
    """A required collaborator or argument is missing."""

    kind = ErrorKind.CONFIGURATION


class TransportError(ArcGISGatewayError):
    """The server could not be reached or answered with a non-2xx status."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, url: str = "", status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SerializationError(ArcGISGatewayError):
    """The response body did not match the expected shape."""

    kind = ErrorKind.SERIALIZATION

    def __init__(self, message: str, url: str = "", body: str = ""):
        super().__init__(message)
        self.url = url
        self.body = body[:500]


class AuthenticationError(ArcGISGatewayError):
    """Credentials were rejected while acquiring a token."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str, root_url: str = "", error: ArcGISError | None = None):
        super().__init__(message)
        self.root_url = root_url
        self.error = error


class OperationCancelled(ArcGISGatewayError):
    """The cancellation signal was set before the request went out."""

    kind = ErrorKind.CANCELLED
