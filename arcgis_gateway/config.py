"""Configuration constants for the ArcGIS Server gateway."""

import os

DEFAULT_ROOT = os.environ.get("ARCGIS_ROOT", "")
# Credentials can also be supplied via ARCGIS_USERNAME / ARCGIS_PASSWORD env vars
DEFAULT_USER = os.environ.get("ARCGIS_USERNAME", "")
DEFAULT_PASSWORD = os.environ.get("ARCGIS_PASSWORD", "")

DEFAULT_FORMAT = "json"
FORMATS = frozenset(["json", "pjson", "html"])

SERVICES_PATH   = "rest/services"
ADMIN_PATH      = "admin"
INFO_PATH       = "rest/info"
TOKEN_PATH      = "tokens/generateToken"
PUBLIC_KEY_PATH = "admin/publicKey"
PORTAL_TOKEN_PATH = "sharing/rest/generateToken"

HTTP_GET  = "GET"
HTTP_POST = "POST"

REQUEST_TIMEOUT    = 30     # seconds per HTTP request
MAX_GET_URL_LENGTH = 2000   # longer GET URLs are sent as POST instead
DEFAULT_RETRIES    = 0      # no automatic retry unless the caller asks for it

TOKEN_EXPIRATION_MINUTES = 60
TOKEN_EXPIRY_LEEWAY      = 30   # seconds shaved off the server's expiry
TOKEN_CLIENT_REFERER     = "referer"
TOKEN_CLIENT_REQUEST_IP  = "requestip"
INVALID_TOKEN_CODES      = frozenset([498])

USER_AGENT = "arcgis-gateway/1.0 (python-requests)"
