"""Authentication submodule – token acquisition, caching, credential encryption."""

from arcgis_gateway.auth.crypto import (
    CryptoProvider,
    RsaEncrypter,
    public_key,
)
from arcgis_gateway.auth.token import (
    StaticTokenProvider,
    Token,
    TokenProvider,
)

__all__ = [
    "CryptoProvider",
    "RsaEncrypter",
    "public_key",
    "StaticTokenProvider",
    "Token",
    "TokenProvider",
]
