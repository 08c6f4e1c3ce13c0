"""HTTP session management for the ArcGIS Server gateway."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DEFAULT_RETRIES, USER_AGENT


def build_session(verify_ssl: bool = True, retries: int = DEFAULT_RETRIES) -> requests.Session:
    """
    Return a requests.Session with keep-alive and an optional retry policy.

    The gateway never retries on its own; pass *retries* > 0 to let urllib3
    back off and retry 5xx responses before the gateway sees them.
    """
    session = requests.Session()
    if retries:
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=None,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
    else:
        adapter = HTTPAdapter()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "application/json, text/plain, */*",
        "Connection": "keep-alive",
    })
    return session
