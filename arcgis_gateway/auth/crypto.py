"""RSA encryption of token-request credentials."""

from __future__ import annotations

from typing import Protocol

from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..operation.auth import GenerateToken


class CryptoProvider(Protocol):
    """Anything able to encrypt a token request with server key material."""

    def encrypt(self, token_request: GenerateToken, exponent: bytes, modulus: bytes) -> GenerateToken:
        ...


def public_key(exponent: bytes, modulus: bytes) -> rsa.RSAPublicKey:
    """Build an RSA public key from big-endian exponent and modulus bytes."""
    e = int.from_bytes(exponent, "big")
    n = int.from_bytes(modulus, "big")
    return rsa.RSAPublicNumbers(e, n).public_key()


class RsaEncrypter:
    """
    Encrypts username, password, expiration, client and referer with
    PKCS#1 v1.5 padding and hex-encodes the ciphertext.

    ``client`` and ``referer`` are only encrypted when non-blank; blank ones
    are sent empty.
    """

    def encrypt(self, token_request: GenerateToken, exponent: bytes, modulus: bytes) -> GenerateToken:
        key = public_key(exponent, modulus)

        def seal(value) -> str:
            return key.encrypt(str(value).encode("utf-8"), padding.PKCS1v15()).hex()

        def seal_optional(value) -> str:
            return seal(value) if value and str(value).strip() else ""

        token_request.encrypt(
            username=seal(token_request.username or ""),
            password=seal(token_request.password or ""),
            expiration=seal(token_request.expiration),
            client=seal_optional(token_request.client),
            referer=seal_optional(token_request.referer),
        )
        return token_request
