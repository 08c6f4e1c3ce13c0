"""
arcgis_gateway
==============
Typed client for the ArcGIS Server REST API: site discovery, feature
queries, geocoding, geometry operations, token authentication and service
administration.

Package structure
-----------------
arcgis_gateway/
├── __init__.py       – package init and public API
├── config.py         – configuration constants
├── errors.py         – error kinds and exception hierarchy
├── logging_setup.py  – package logger
├── session.py        – requests.Session factory
├── transport.py      – single GET / POST exchange
├── endpoint.py       – endpoint kinds and URL resolution
├── serializer.py     – request / response codec
├── gateway.py        – PortalGateway
├── walker.py         – depth-first site walk
├── cli.py            – argparse CLI (``python -m arcgis_gateway``)
├── auth/             – sub-package: tokens and credential encryption
│   ├── token.py      – Token, TokenProvider, StaticTokenProvider
│   └── crypto.py     – RsaEncrypter
└── operation/        – sub-package: request / response data contracts

Quick start
-----------
    from arcgis_gateway import PortalGateway, TokenProvider
    from arcgis_gateway.operation import Query

    gateway = PortalGateway(
        "https://sampleserver6.arcgisonline.com/arcgis",
        token_provider=TokenProvider("user", "password"),
    )
    site = gateway.describe_site()
    result = gateway.query(Query("Wildfire/MapServer/0", where="1=1"))
"""

from .auth     import RsaEncrypter, StaticTokenProvider, Token, TokenProvider
from .endpoint import AbsoluteEndpoint, ArcGISServerAdminEndpoint, ArcGISServerEndpoint
from .errors   import (
    ArcGISError, ArcGISGatewayError, AuthenticationError, ConfigurationError,
    ErrorKind, OperationCancelled, SerializationError, TransportError,
)
from .gateway  import PortalGateway
from .serializer import JsonSerializer
from .walker   import SiteWalker

__all__ = [
    "PortalGateway",
    "SiteWalker",
    "TokenProvider",
    "StaticTokenProvider",
    "Token",
    "RsaEncrypter",
    "JsonSerializer",
    "ArcGISServerEndpoint",
    "ArcGISServerAdminEndpoint",
    "AbsoluteEndpoint",
    "ArcGISError",
    "ArcGISGatewayError",
    "AuthenticationError",
    "ConfigurationError",
    "ErrorKind",
    "OperationCancelled",
    "SerializationError",
    "TransportError",
]
