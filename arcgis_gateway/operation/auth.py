"""Token generation and key-exchange data contracts."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import (
    HTTP_POST, TOKEN_CLIENT_REFERER, TOKEN_CLIENT_REQUEST_IP,
    TOKEN_EXPIRATION_MINUTES,
)
from ..errors import SerializationError
from .common import OperationRequest, PortalResponse, wire


@dataclass
class GenerateToken(OperationRequest):
    """
    Credentials posted to the token service.

    After :meth:`encrypt` every credential field holds hex-encoded
    ciphertext and ``encrypted`` is true; nothing is sent in clear text.
    """

    username: str | None = wire("username")
    password: str | None = wire("password")
    expiration: int | str = wire("expiration", TOKEN_EXPIRATION_MINUTES)
    client: str | None = wire("client")
    referer: str | None = wire("referer")
    encrypted: bool | None = wire("encrypted")

    requires_token = False
    http_method = HTTP_POST

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.client is None:
            self.client = TOKEN_CLIENT_REFERER if self.referer else TOKEN_CLIENT_REQUEST_IP

    def encrypt(self, username: str, password: str, expiration: str,
                client: str = "", referer: str = "") -> None:
        self.username = username
        self.password = password
        self.expiration = expiration
        self.client = client
        self.referer = referer
        self.encrypted = True


@dataclass
class GenerateTokenResponse(PortalResponse):
    token: str | None = wire("token")
    expires: int | None = wire("expires", convert=int)
    ssl: bool | None = wire("ssl")


@dataclass
class PublicKey(OperationRequest):
    """Fetches the RSA key material used to encrypt token requests."""

    requires_token = False


@dataclass
class PublicKeyResponse(PortalResponse):
    public_key: str | None = wire("publicKey")
    exponent: str | None = wire("exponent")
    modulus: str | None = wire("modulus")

    @property
    def has_key(self) -> bool:
        return bool(self.exponent and self.modulus)

    @property
    def exponent_bytes(self) -> bytes:
        return _hex_bytes(self.exponent, "exponent")

    @property
    def modulus_bytes(self) -> bytes:
        return _hex_bytes(self.modulus, "modulus")


def _hex_bytes(text: str | None, name: str) -> bytes:
    """Big-endian bytes of a hex key component; odd-length values are left-padded."""
    digits = (text or "").strip()
    if digits[:2].lower() == "0x":
        digits = digits[2:]
    if len(digits) % 2:
        digits = "0" + digits
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise SerializationError(f"Public key {name} is not hex: {text!r}") from exc
