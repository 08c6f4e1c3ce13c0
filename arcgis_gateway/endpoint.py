"""
arcgis_gateway.endpoint
=======================
Endpoint resolution: turn a logical endpoint plus an operation name into the
URL that is actually requested, and work out which server root a URL belongs
to so tokens can be scoped to it.

Three kinds of endpoint exist:

* :class:`ArcGISServerEndpoint` – a path below ``<root>/rest/services/``.
* :class:`ArcGISServerAdminEndpoint` – a path below ``<root>/admin/``.
* :class:`AbsoluteEndpoint` – a fully qualified URL used as-is.

No network access happens here; everything is a pure string transform.
"""

from __future__ import annotations

import urllib.parse
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from .config import ADMIN_PATH, SERVICES_PATH
from .errors import ConfigurationError

_ROOT_MARKERS = ("/rest/", "/admin/", "/tokens/", "/sharing/")
_ROOT_SUFFIXES = ("/rest/services", "/rest", "/admin")


def join_path(*segments: str) -> str:
    """
    Join path segments with exactly one ``/`` between them.

    Leading and trailing slashes are trimmed from every segment first, and
    empty segments are dropped, so ``join_path("/Folder/", "Simplify")``
    gives ``"Folder/Simplify"``.
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/".join(parts)


def join_url(url: str, *segments: str) -> str:
    """Append path segments to an absolute URL without doubling slashes."""
    tail = join_path(*segments)
    base = url.rstrip("/")
    return f"{base}/{tail}" if tail else base


def _check_absolute(url: str) -> urllib.parse.SplitResult:
    parts = urllib.parse.urlsplit(url)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Not an absolute http(s) URL: {url!r}")
    return parts


def normalize_root(url: str) -> str:
    """
    Canonical form of a server root: ``<scheme>://<host>/<context>/``.

    Accepts the site root itself or the services / admin directory below it,
    so ``http://host/arcgis/rest/services`` and ``http://host/arcgis`` both
    map to ``http://host/arcgis/``.  Query strings and fragments are dropped.
    """
    if not url or not url.strip():
        raise ConfigurationError("A root URL is required")
    parts = _check_absolute(url.strip())
    path = parts.path.rstrip("/")
    lowered = path.lower()
    for suffix in _ROOT_SUFFIXES:
        if lowered.endswith(suffix):
            path = path[: -len(suffix)]
            break
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, path + "/", "", ""))


def root_of(url: str) -> str:
    """
    Best guess at the server root owning an absolute *url*.

    Everything before the first ``/rest/``, ``/admin/``, ``/tokens/`` or
    ``/sharing/`` segment; the bare host when none is present.
    """
    parts = _check_absolute(url)
    path = parts.path
    lowered = path.lower() + "/"
    cut = min((i for i in (lowered.find(m) for m in _ROOT_MARKERS) if i >= 0), default=None)
    path = path[:cut] if cut is not None else ""
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, path.rstrip("/") + "/", "", ""))


class Endpoint(ABC):
    """Common interface for the endpoint kinds."""

    @property
    @abstractmethod
    def relative_url(self) -> str:
        ...

    @abstractmethod
    def build_absolute_url(self, root_url: str) -> str:
        ...

    @abstractmethod
    def with_operation(self, operation: str) -> "Endpoint":
        ...

    def root_url(self, default_root: str) -> str:
        return default_root


@dataclass(frozen=True)
class ArcGISServerEndpoint(Endpoint):
    """A resource below the server's ``rest/services`` directory."""

    path: str = ""

    prefix: ClassVar[str] = SERVICES_PATH

    def __post_init__(self) -> None:
        path = (self.path or "").strip().strip("/")
        if path.lower() == self.prefix.lower():
            path = ""
        elif path.lower().startswith(self.prefix.lower() + "/"):
            path = path[len(self.prefix):].strip("/")
        object.__setattr__(self, "path", path)

    @property
    def relative_url(self) -> str:
        return join_path(self.prefix, self.path)

    @property
    def site_path(self) -> str:
        """Path as shown in a site description, e.g. ``/Petroleum``."""
        return "/" + self.path

    def build_absolute_url(self, root_url: str) -> str:
        return join_url(root_url, self.relative_url)

    def with_operation(self, operation: str) -> "ArcGISServerEndpoint":
        return type(self)(join_path(self.path, operation))


@dataclass(frozen=True)
class ArcGISServerAdminEndpoint(ArcGISServerEndpoint):
    """A resource below the server's ``admin`` directory."""

    prefix: ClassVar[str] = ADMIN_PATH


@dataclass(frozen=True)
class AbsoluteEndpoint(Endpoint):
    """A fully qualified URL, possibly on a different server."""

    url: str = ""

    def __post_init__(self) -> None:
        url = (self.url or "").strip()
        if _check_absolute(url).path.strip("/"):
            url = url.rstrip("/")
        object.__setattr__(self, "url", url)

    @property
    def relative_url(self) -> str:
        return self.url

    def build_absolute_url(self, root_url: str) -> str:
        return self.url

    def with_operation(self, operation: str) -> "AbsoluteEndpoint":
        return AbsoluteEndpoint(join_url(self.url, operation))

    def root_url(self, default_root: str) -> str:
        return root_of(self.url)


def as_endpoint(value: "Endpoint | str | None") -> Endpoint:
    """Coerce *value* into an endpoint; strings starting http(s):// are absolute."""
    if value is None:
        raise ConfigurationError("An endpoint is required")
    if isinstance(value, Endpoint):
        return value
    if not isinstance(value, str):
        raise ConfigurationError(f"Cannot build an endpoint from {type(value).__name__}")
    if value.strip().lower().startswith(("http://", "https://")):
        return AbsoluteEndpoint(value)
    return ArcGISServerEndpoint(value)


def resolve(endpoint: "Endpoint | str | None", operation: str = "") -> Endpoint:
    """Return *endpoint* with *operation* appended as the last path segment."""
    endpoint = as_endpoint(endpoint)
    return endpoint.with_operation(operation) if operation else endpoint
