"""
Depth-first walk of a server's ``rest/services`` folder tree.

The walk never raises for a single folder: a folder that cannot be described
is recorded with its ``error`` set and is not descended into, and the walk
carries on with its siblings.  Setting the cancel event stops the walk
before the next folder and returns what has been collected so far.
"""

from __future__ import annotations

import threading

from .endpoint import join_path
from .errors import OperationCancelled, SerializationError, TransportError
from .logging_setup import log
from .operation import ServiceDescriptionDetails, SiteDescription, SiteFolderDescription

try:
    from tqdm import tqdm as _tqdm
    _TQDM_AVAILABLE = True
except ImportError:
    _TQDM_AVAILABLE = False


def child_path(parent: str, folder: str) -> str:
    """
    Site path of *folder* listed under *parent*.

    Servers list nested folders by their full name (``Parent/Child``); a bare
    name is joined onto the parent.
    """
    folder = folder.strip("/")
    parent = parent.strip("/")
    if not parent or folder == parent or folder.startswith(parent + "/"):
        return "/" + folder
    return "/" + join_path(parent, folder)


class SiteWalker:
    """Builds a :class:`SiteDescription` by walking folders through a gateway."""

    def __init__(self, gateway, progress: bool = False) -> None:
        self.gateway = gateway
        self.progress = progress and _TQDM_AVAILABLE
        self._visited: set[str] = set()
        self._stats = {"ok": 0, "err": 0}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def describe_site(self, cancel: threading.Event | None = None) -> SiteDescription:
        site = SiteDescription()
        self._visited = set()
        self._stats = {"ok": 0, "err": 0}
        stack = ["/"]
        bar = _tqdm(desc="Walking", unit="folder", dynamic_ncols=True) if self.progress else None

        while stack:
            if cancel is not None and cancel.is_set():
                site.cancelled = True
                log.info("Site walk cancelled after %d folder(s)", len(site.resources))
                break
            path = stack.pop()
            if path in self._visited:
                log.warning("Folder %s listed twice; not walking it again", path)
                continue
            self._visited.add(path)

            try:
                node = self._describe(path, cancel)
            except OperationCancelled:
                site.cancelled = True
                log.info("Site walk cancelled at %s", path)
                break
            site.resources.append(node)

            if node.error is not None:
                self._stats["err"] += 1
                log.warning("Folder %s recorded with error: %s", path, node.error.message)
            else:
                self._stats["ok"] += 1
                children = [child_path(path, f) for f in node.folders]
                # Reversed so folders are visited in the order the server lists them.
                stack.extend(reversed(children))

            if bar is not None:
                bar.total = len(self._visited) + len(stack)
                bar.update(1)
                bar.set_postfix(ok=self._stats["ok"], err=self._stats["err"])

        if bar is not None:
            bar.close()
        log.info(
            "Site walk complete. folders=%d  services=%d  errors=%d",
            len(site.resources), len(site.services), self._stats["err"],
        )
        return site

    def describe_services(self, services, cancel: threading.Event | None = None) -> list[ServiceDescriptionDetails]:
        """
        Describe every service in *services* (a list or a SiteDescription).
        Stops early, returning the partial list, when *cancel* is set.
        """
        if isinstance(services, SiteDescription):
            services = services.services
        results = []
        for service in services:
            if cancel is not None and cancel.is_set():
                log.info("Service description cancelled after %d service(s)", len(results))
                break
            results.append(self.gateway.describe_service(service, cancel))
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _describe(self, path: str, cancel: threading.Event | None) -> SiteFolderDescription:
        try:
            node = self.gateway.describe_folder(path, cancel)
        except OperationCancelled:
            raise
        except TransportError as exc:
            return SiteFolderDescription.failed(
                path, f"TransportError for DescribeFolder at path {path}: {exc}")
        except SerializationError as exc:
            return SiteFolderDescription.failed(
                path, f"SerializationError for DescribeFolder at path {path}: {exc}")
        except Exception as exc:
            return SiteFolderDescription.failed(
                path, f"{type(exc).__name__} for DescribeFolder at path {path}: {exc}")
        log.debug("Folder %s: %d folder(s), %d service(s)", path, len(node.folders), len(node.services))
        return node
