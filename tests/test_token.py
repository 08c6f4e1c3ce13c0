"""
Tests for token acquisition, caching and the public-key handshake.

All network calls go through a mocked requests.Session.
"""

import json
import threading
import time
import unittest
from unittest.mock import MagicMock

import requests
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from arcgis_gateway.auth import StaticTokenProvider, Token, TokenProvider
from arcgis_gateway.errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    OperationCancelled,
    SerializationError,
    TransportError,
)
from arcgis_gateway.operation import AuthInfo, ServerInfoResponse

ROOT = "https://host/arcgis/"
KEY_URL = "https://host/arcgis/admin/publicKey"
TOKEN_URL = "https://host/arcgis/tokens/generateToken"
NOW = 1_700_000_000.0


def _response(payload, status=200, url=""):
    resp = requests.Response()
    resp.status_code = status
    resp._content = payload.encode() if isinstance(payload, str) else json.dumps(payload).encode()
    resp.encoding = "utf-8"
    resp.url = url
    return resp


class _Server:
    """Fake token server: answers publicKey GETs and generateToken POSTs."""

    def __init__(self, key=None, token="tok-1", expires_in=3600, key_material=None):
        self.key = key
        self.token = token
        self.expires_in = expires_in
        self.key_material = key_material
        self.issued = 0
        self.session = MagicMock(spec=requests.Session)
        self.session.get.side_effect = self.get
        self.session.post.side_effect = self.post

    def get(self, url, params=None, timeout=None):
        if self.key_material is not None:
            return _response(self.key_material, url=url)
        if self.key is None:
            return _response({"error": {"code": 404, "message": "Not found"}}, 404, url)
        numbers = self.key.public_key().public_numbers()
        return _response({
            "publicKey": "unused",
            "exponent": format(numbers.e, "x"),
            "modulus": format(numbers.n, "x"),
        }, url=url)

    def post(self, url, data=None, timeout=None):
        self.issued += 1
        return _response({
            "token": f"{self.token}-{self.issued}",
            "expires": int((NOW + self.expires_in) * 1000),
        }, url=url)

    def last_post_data(self):
        return self.session.post.call_args.kwargs["data"]


class TestToken(unittest.TestCase):
    def test_not_expired_before_leeway(self):
        token = Token("t", expires=int((NOW + 60) * 1000))
        self.assertFalse(token.is_expired(NOW, leeway=30))

    def test_expired_inside_leeway(self):
        token = Token("t", expires=int((NOW + 10) * 1000))
        self.assertTrue(token.is_expired(NOW, leeway=30))

    def test_no_expiry_never_expires(self):
        self.assertFalse(Token("t").is_expired(NOW))

    def test_str_is_value(self):
        self.assertEqual(str(Token("abc")), "abc")


class TestHandshake(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.key = rsa.generate_private_key(public_exponent=65537, key_size=1024)

    def _decrypt(self, hex_text):
        return self.key.decrypt(bytes.fromhex(hex_text), padding.PKCS1v15()).decode()

    def test_encrypted_credentials(self):
        server = _Server(key=self.key)
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)

        token = provider.get_token(ROOT)

        server.session.get.assert_called_once()
        self.assertEqual(server.session.get.call_args.args[0], KEY_URL)
        self.assertEqual(server.session.post.call_args.args[0], TOKEN_URL)
        data = server.last_post_data()
        self.assertEqual(data["encrypted"], "true")
        self.assertNotEqual(data["username"], "user")
        self.assertNotEqual(data["password"], "pass")
        self.assertEqual(self._decrypt(data["username"]), "user")
        self.assertEqual(self._decrypt(data["password"]), "pass")
        self.assertEqual(self._decrypt(data["expiration"]), "60")
        self.assertEqual(token.value, "tok-1-1")
        self.assertEqual(token.root_url, ROOT)
        self.assertFalse(token.federated)

    def test_unpadded_exponent_accepted(self):
        server = _Server(key=self.key)
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)

        token = provider.get_token("http://host/arcgis")

        self.assertEqual(server.session.get.call_args.args[0], "http://host/arcgis/admin/publicKey")
        self.assertEqual(self._decrypt(server.last_post_data()["username"]), "user")
        self.assertEqual(token.value, "tok-1-1")

    def test_padded_exponent_accepted(self):
        numbers = self.key.public_key().public_numbers()
        server = _Server(key_material={"exponent": "010001", "modulus": format(numbers.n, "x")})
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)
        provider.get_token(ROOT)
        self.assertEqual(self._decrypt(server.last_post_data()["password"]), "pass")

    def test_non_hex_key_material(self):
        server = _Server(key_material={"exponent": "10001", "modulus": "not-a-modulus"})
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)
        with self.assertRaises(SerializationError) as ctx:
            provider.get_token(ROOT)
        self.assertEqual(ctx.exception.kind, ErrorKind.SERIALIZATION)
        server.session.post.assert_not_called()

    def test_root_is_normalised(self):
        server = _Server(key=self.key)
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)
        token = provider.get_token("https://host/arcgis/rest/services")
        self.assertEqual(token.root_url, ROOT)

    def test_plaintext_when_no_public_key(self):
        server = _Server(key=None)
        provider = TokenProvider("user", "pass", session=server.session, clock=lambda: NOW)
        provider.get_token(ROOT)
        data = server.last_post_data()
        self.assertEqual(data["username"], "user")
        self.assertEqual(data["password"], "pass")
        self.assertNotIn("encrypted", data)

    def test_encryption_disabled_skips_key_request(self):
        server = _Server(key=self.key)
        provider = TokenProvider("user", "pass", session=server.session, use_encryption=False,
                                 clock=lambda: NOW)
        provider.get_token(ROOT)
        server.session.get.assert_not_called()
        self.assertEqual(server.last_post_data()["username"], "user")

    def test_missing_crypto_provider(self):
        server = _Server(key=self.key)
        provider = TokenProvider("user", "pass", session=server.session, crypto_provider=None,
                                 clock=lambda: NOW)
        with self.assertRaises(ConfigurationError):
            provider.get_token(ROOT)
        server.session.post.assert_not_called()

    def test_custom_crypto_provider(self):
        server = _Server(key=self.key)
        crypto = MagicMock()
        crypto.encrypt.side_effect = lambda request, e, n: request
        provider = TokenProvider("user", "pass", session=server.session, crypto_provider=crypto,
                                 clock=lambda: NOW)
        provider.get_token(ROOT)
        _, exponent, modulus = crypto.encrypt.call_args.args
        self.assertEqual(int.from_bytes(exponent, "big"), 65537)
        self.assertEqual(int.from_bytes(modulus, "big"), self.key.public_key().public_numbers().n)


class TestCaching(unittest.TestCase):
    def setUp(self):
        self.now = NOW
        self.server = _Server()
        self.provider = TokenProvider("user", "pass", session=self.server.session,
                                      use_encryption=False, clock=lambda: self.now)

    def test_cached_token_reused(self):
        first = self.provider.get_token(ROOT)
        second = self.provider.get_token(ROOT)
        self.assertEqual(first.value, second.value)
        self.assertEqual(self.server.session.post.call_count, 1)

    def test_expired_token_reacquired(self):
        first = self.provider.get_token(ROOT)
        self.now = NOW + 3600
        second = self.provider.get_token(ROOT)
        self.assertNotEqual(first.value, second.value)
        self.assertEqual(self.server.session.post.call_count, 2)

    def test_tokens_scoped_per_root(self):
        a = self.provider.get_token(ROOT)
        b = self.provider.get_token("https://other/arcgis")
        self.assertNotEqual(a.value, b.value)
        self.assertEqual(b.root_url, "https://other/arcgis/")
        self.assertEqual(self.server.session.post.call_args.args[0], "https://other/arcgis/tokens/generateToken")

    def test_invalidate(self):
        self.provider.get_token(ROOT)
        self.provider.invalidate(ROOT)
        self.provider.get_token(ROOT)
        self.assertEqual(self.server.session.post.call_count, 2)

    def test_cancelled_before_acquisition(self):
        cancel = threading.Event()
        cancel.set()
        with self.assertRaises(OperationCancelled) as ctx:
            self.provider.get_token(ROOT, cancel=cancel)
        self.assertEqual(ctx.exception.kind, ErrorKind.CANCELLED)
        self.server.session.post.assert_not_called()

    def test_one_acquisition_for_concurrent_callers(self):
        original = self.server.post

        def slow_post(*args, **kwargs):
            time.sleep(0.05)
            return original(*args, **kwargs)

        self.server.session.post.side_effect = slow_post
        barrier = threading.Barrier(5)
        values = []

        def worker():
            barrier.wait()
            values.append(self.provider.get_token(ROOT).value)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(self.server.session.post.call_count, 1)
        self.assertEqual(set(values), {"tok-1-1"})


class TestFailures(unittest.TestCase):
    def test_rejected_credentials(self):
        session = MagicMock(spec=requests.Session)
        session.post.return_value = _response({"error": {
            "code": 400, "message": "Unable to generate token.",
            "details": ["Invalid username or password."],
        }})
        provider = TokenProvider("user", "wrong", session=session, use_encryption=False)

        with self.assertRaises(AuthenticationError) as ctx:
            provider.get_token(ROOT)
        self.assertEqual(ctx.exception.kind, ErrorKind.AUTHENTICATION)
        self.assertEqual(ctx.exception.root_url, ROOT)
        self.assertEqual(ctx.exception.error.details, ["Invalid username or password."])

    def test_rejection_does_not_poison_other_roots(self):
        def post(url, data=None, timeout=None):
            if url.startswith("https://bad/"):
                return _response({"error": {"code": 400, "message": "Unable to generate token."}})
            return _response({"token": "good", "expires": int((NOW + 3600) * 1000)})

        session = MagicMock(spec=requests.Session)
        session.post.side_effect = post
        provider = TokenProvider("user", "pass", session=session, use_encryption=False, clock=lambda: NOW)

        with self.assertRaises(AuthenticationError):
            provider.get_token("https://bad/arcgis")
        self.assertEqual(provider.get_token(ROOT).value, "good")

    def test_missing_token_in_response(self):
        session = MagicMock(spec=requests.Session)
        session.post.return_value = _response({"ssl": False})
        provider = TokenProvider("user", "pass", session=session, use_encryption=False)
        with self.assertRaises(AuthenticationError):
            provider.get_token(ROOT)

    def test_token_service_unreachable(self):
        session = MagicMock(spec=requests.Session)
        session.post.side_effect = requests.ConnectionError("refused")
        provider = TokenProvider("user", "pass", session=session, use_encryption=False)
        with self.assertRaises(TransportError):
            provider.get_token(ROOT)

    def test_username_required(self):
        with self.assertRaises(ConfigurationError):
            TokenProvider("", "pass", session=MagicMock(spec=requests.Session))


class TestFromServerInfo(unittest.TestCase):
    def _info(self, url):
        return ServerInfoResponse(auth_info=AuthInfo(True, url))

    def test_server_token_service(self):
        provider = TokenProvider.from_server_info(
            self._info(TOKEN_URL), "user", "pass", session=MagicMock(spec=requests.Session))
        self.assertEqual(provider.token_url, TOKEN_URL)
        self.assertFalse(provider.federated)

    def test_portal_token_service_is_federated(self):
        provider = TokenProvider.from_server_info(
            self._info("https://portal/portal/sharing/rest/generateToken"), "user", "pass",
            session=MagicMock(spec=requests.Session))
        self.assertTrue(provider.federated)

    def test_no_token_service(self):
        with self.assertRaises(ConfigurationError):
            TokenProvider.from_server_info(ServerInfoResponse(), "user", "pass")


class TestStaticTokenProvider(unittest.TestCase):
    def test_same_value_for_every_root(self):
        provider = StaticTokenProvider("pre-issued")
        self.assertEqual(provider.get_token("https://a/arcgis").value, "pre-issued")
        self.assertEqual(provider.get_token("https://b/arcgis").root_url, "https://b/arcgis/")

    def test_value_required(self):
        with self.assertRaises(ConfigurationError):
            StaticTokenProvider("")


if __name__ == "__main__":
    unittest.main()
