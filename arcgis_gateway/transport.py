"""Single HTTP exchange: send one GET or POST and return the body text."""

import threading

import requests

from .config import HTTP_POST, REQUEST_TIMEOUT
from .errors import OperationCancelled, TransportError
from .logging_setup import log


def check_cancelled(cancel: "threading.Event | None", what: str = "request") -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled(f"{what} cancelled before it was sent")


def send(
    session: requests.Session,
    method: str,
    url: str,
    params: dict,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    """
    Issue the request and return the response text.

    GET carries *params* in the query string, POST as a form-encoded body.
    Connection failures, timeouts and non-2xx statuses all raise
    :class:`TransportError`; the caller decides what to do with the body.
    """
    try:
        if method == HTTP_POST:
            resp = session.post(url, data=params, timeout=timeout)
        else:
            resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        raise TransportError(f"HTTP {status} for {method} {url}", url, status) from exc
    except requests.RequestException as exc:
        raise TransportError(f"{type(exc).__name__} for {method} {url}: {exc}", url) from exc
    log.debug("%s %s -> %s (%d bytes)", method, url, resp.status_code, len(resp.content or b""))
    return resp.text
