"""
Token acquisition and caching.

Tokens are cached per server root.  A cached token is reused until it is
within ``TOKEN_EXPIRY_LEEWAY`` seconds of the server-reported expiry; the
next call after that acquires a fresh one.  Acquisition for a given root is
serialized with a lock so threads racing on an expired token perform a
single handshake between them.

Handshake when encryption is enabled:
  1. GET ``<root>/admin/publicKey`` for the RSA exponent and modulus.
  2. If key material came back, encrypt every credential field with the
     crypto provider and set ``encrypted=true``.
  3. POST the token request to ``<root>/tokens/generateToken`` (or the
     configured token service).
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

import requests

from ..config import (
    HTTP_GET, HTTP_POST, PORTAL_TOKEN_PATH, PUBLIC_KEY_PATH, REQUEST_TIMEOUT,
    TOKEN_EXPIRATION_MINUTES, TOKEN_EXPIRY_LEEWAY, TOKEN_PATH,
)
from ..endpoint import AbsoluteEndpoint, join_url, normalize_root
from ..errors import AuthenticationError, ConfigurationError, TransportError
from ..logging_setup import log, mask
from ..operation.auth import GenerateToken, GenerateTokenResponse, PublicKey, PublicKeyResponse
from ..serializer import JsonSerializer
from ..session import build_session
from ..transport import check_cancelled, send
from .crypto import RsaEncrypter

_DEFAULT = object()


@dataclass
class Token:
    """An issued token; ``expires`` is epoch milliseconds as the server reports it."""

    value: str
    expires: int | None = None
    root_url: str = ""
    federated: bool = False

    def is_expired(self, now: float | None = None, leeway: float = TOKEN_EXPIRY_LEEWAY) -> bool:
        if self.expires is None:
            return False
        now = time.time() if now is None else now
        return now >= self.expires / 1000.0 - leeway

    def __str__(self) -> str:
        return self.value


class TokenProvider:
    """
    Acquires, caches and refreshes tokens for one set of credentials.

    Pass ``use_encryption=False`` for servers that do not publish a public
    key; pass ``crypto_provider=None`` to forbid encryption outright, in which
    case a server that offers key material raises ConfigurationError.
    """

    def __init__(
        self,
        username: str,
        password: str,
        session: requests.Session | None = None,
        serializer=None,
        crypto_provider=_DEFAULT,
        use_encryption: bool = True,
        expiration: int = TOKEN_EXPIRATION_MINUTES,
        referer: str | None = None,
        token_url: str | None = None,
        federated: bool = False,
        timeout: float = REQUEST_TIMEOUT,
        clock=time.time,
    ):
        if not username:
            raise ConfigurationError("A username is required for token acquisition")
        self.username = username
        self.password = password
        self.session = session or build_session()
        self.serializer = serializer or JsonSerializer()
        self.crypto_provider = RsaEncrypter() if crypto_provider is _DEFAULT else crypto_provider
        self.use_encryption = use_encryption
        self.expiration = expiration
        self.referer = referer
        self.token_url = token_url
        self.federated = federated
        self.timeout = timeout
        self.clock = clock
        self._cache: dict[str, Token] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_server_info(cls, info, username: str, password: str, **kwargs) -> "TokenProvider":
        """
        Build a provider from a ``rest/info`` response, using the token
        service it advertises.  A Portal token service marks tokens federated.
        """
        auth = info.auth_info
        if auth is None or not auth.token_services_url:
            raise ConfigurationError("Server does not advertise a token service")
        url = auth.token_services_url
        kwargs.setdefault("federated", PORTAL_TOKEN_PATH in url.lower())
        return cls(username, password, token_url=url, **kwargs)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def _lock_for(self, root: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(root, threading.Lock())

    def _cached(self, root: str) -> Token | None:
        token = self._cache.get(root)
        if token is not None and not token.is_expired(self.clock()):
            return token
        return None

    def get_token(self, root_url: str, cancel: threading.Event | None = None) -> Token:
        root = normalize_root(root_url)
        token = self._cached(root)
        if token is not None:
            log.debug("Token cache hit for %s", root)
            return token
        with self._lock_for(root):
            # Another thread may have refreshed it while we waited.
            token = self._cached(root)
            if token is not None:
                return token
            if root in self._cache:
                log.info("Token for %s expired; acquiring a new one", root)
            check_cancelled(cancel, "Token acquisition")
            token = self._acquire(root)
            self._cache[root] = token
            return token

    def invalidate(self, root_url: str) -> None:
        root = normalize_root(root_url)
        if self._cache.pop(root, None) is not None:
            log.debug("Dropped cached token for %s", root)

    # ------------------------------------------------------------------
    # Handshake
    # ------------------------------------------------------------------

    def _public_key(self, root: str) -> PublicKeyResponse | None:
        request = PublicKey(AbsoluteEndpoint(join_url(root, PUBLIC_KEY_PATH)))
        url = request.endpoint.build_absolute_url(root)
        try:
            body = send(self.session, HTTP_GET, url,
                        self.serializer.serialize(request, HTTP_GET), self.timeout)
        except TransportError as exc:
            log.debug("No public key available at %s: %s", url, exc)
            return None
        key = self.serializer.deserialize(body, PublicKeyResponse, url)
        if key.error is not None:
            log.debug("Public key request refused at %s: %s", url, key.error)
            return None
        return key

    def _acquire(self, root: str) -> Token:
        url = self.token_url or join_url(root, TOKEN_PATH)
        request = GenerateToken(
            AbsoluteEndpoint(url),
            username=self.username,
            password=self.password,
            expiration=self.expiration,
            referer=self.referer,
        )

        if self.use_encryption:
            key = self._public_key(root)
            if key is not None and key.has_key:
                if self.crypto_provider is None:
                    raise ConfigurationError(
                        f"{root} requires encrypted credentials but no crypto provider is configured"
                    )
                request = self.crypto_provider.encrypt(request, key.exponent_bytes, key.modulus_bytes)
                log.debug("Token request for %s encrypted", root)
            else:
                log.debug("Sending token request for %s without encryption", root)

        log.info("Requesting token for %s as %s", root, self.username)
        body = send(self.session, HTTP_POST, url,
                    self.serializer.serialize(request, HTTP_POST), self.timeout)
        response = self.serializer.deserialize(body, GenerateTokenResponse, url)
        if response.error is not None:
            raise AuthenticationError(f"Token request rejected by {root}: {response.error}",
                                      root, response.error)
        if not response.token:
            raise AuthenticationError(f"Token service at {url} returned no token", root)

        token = Token(response.token, response.expires, root, self.federated)
        log.info("Acquired token %s for %s", mask(token.value), root)
        return token


class StaticTokenProvider:
    """Hands out a pre-issued token for every root it is asked about."""

    def __init__(self, value: str, expires: int | None = None, federated: bool = False):
        if not value:
            raise ConfigurationError("A token value is required")
        self.value = value
        self.expires = expires
        self.federated = federated

    def get_token(self, root_url: str, cancel: threading.Event | None = None) -> Token:
        return Token(self.value, self.expires, normalize_root(root_url), self.federated)

    def invalidate(self, root_url: str) -> None:
        log.warning("Pre-issued token for %s was rejected by the server", root_url)
