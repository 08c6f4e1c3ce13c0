"""
Command-line interface for the ArcGIS Server gateway.

    arcgis-gateway --root https://host/arcgis ping
    arcgis-gateway --root https://host/arcgis describe-site
    arcgis-gateway --root https://host/arcgis --user admin token
"""

import argparse
import getpass
import sys

from .auth import TokenProvider
from .config import DEFAULT_PASSWORD, DEFAULT_ROOT, DEFAULT_USER
from .errors import ArcGISGatewayError
from .gateway import PortalGateway
from .logging_setup import _COLORLOG_AVAILABLE, _setup_logging, log, mask
from .session import build_session
from .walker import _TQDM_AVAILABLE


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="arcgis-gateway",
        description="Typed client for the ArcGIS Server REST API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Credentials can also be provided via the ARCGIS_USERNAME and\n"
            "ARCGIS_PASSWORD env vars.  If a username is given without a\n"
            "password you will be prompted for it."
        ),
    )
    parser.add_argument(
        "--root", default=DEFAULT_ROOT, required=not DEFAULT_ROOT,
        help="Server root, e.g. https://host/arcgis (default: ARCGIS_ROOT env var)",
    )
    parser.add_argument("--user", default=DEFAULT_USER, help="Username for token-secured servers")
    parser.add_argument(
        "--password", default=DEFAULT_PASSWORD,
        help="Password (overrides ARCGIS_PASSWORD env var)",
    )
    parser.add_argument(
        "--no-encryption", dest="use_encryption", action="store_false", default=True,
        help="Send token credentials without RSA encryption",
    )
    parser.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification (use for self-signed certs)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("ping", help="Check the services directory answers")
    sub.add_parser("info", help="Show server version and security settings")
    sub.add_parser("describe-site", help="Walk every folder and list its services")
    sub.add_parser("token", help="Acquire a token and print it")
    return parser.parse_args(argv)


def _token_provider(args, session):
    if not args.user:
        return None
    if not args.password:
        args.password = getpass.getpass(f"Password for {args.user}: ")
    return TokenProvider(
        args.user, args.password, session=session, use_encryption=args.use_encryption,
    )


def _ping(gateway: PortalGateway, args) -> int:
    response = gateway.ping()
    if response.error is not None:
        log.error("Ping failed: %s", response.error)
        return 1
    log.info("%s is up", gateway.root_url)
    return 0


def _info(gateway: PortalGateway, args) -> int:
    info = gateway.info()
    if info.error is not None:
        log.error("Info request failed: %s", info.error)
        return 1
    log.info("Version          : %s", info.full_version or info.current_version)
    if info.auth_info is not None:
        log.info("Token security   : %s", info.auth_info.is_token_based_security)
        log.info("Token service    : %s", info.auth_info.token_services_url or "-")
    if info.owning_system_url:
        log.info("Federated with   : %s", info.owning_system_url)
    return 0


def _describe_site(gateway: PortalGateway, args) -> int:
    site = gateway.describe_site(progress=True)
    for node in site:
        if node.error is not None:
            log.warning("%-30s ERROR %s", node.path, node.error.message)
            continue
        log.info("%-30s %d folder(s)", node.path, len(node.folders))
        for service in node.services:
            log.info("    %s (%s)", service.name, service.type)
    return 1 if site.errors else 0


def _token(gateway: PortalGateway, args) -> int:
    if gateway.token_provider is None:
        log.error("--user is required to acquire a token")
        return 2
    token = gateway.token_provider.get_token(gateway.root_url)
    log.info("Acquired %s for %s, expires %s",
             mask(token.value), token.root_url or gateway.root_url, token.expires)
    print(token.value)
    return 0


_COMMANDS = {
    "ping": _ping,
    "info": _info,
    "describe-site": _describe_site,
    "token": _token,
}


def main(argv=None) -> int:
    args = parse_args(argv)

    _setup_logging(debug=args.debug, quiet=args.quiet)

    if not args.verify_ssl:
        import urllib3
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")

    if args.command == "describe-site" and not _TQDM_AVAILABLE:
        log.info("Tip: install tqdm for a live progress bar  (pip install tqdm)")
    if not _COLORLOG_AVAILABLE:
        log.debug("Tip: install colorlog for colored output   (pip install colorlog)")

    session = build_session(verify_ssl=args.verify_ssl)
    try:
        gateway = PortalGateway(
            args.root, token_provider=_token_provider(args, session), session=session,
        )
        return _COMMANDS[args.command](gateway, args)
    except ArcGISGatewayError as exc:
        log.error("%s error: %s", exc.kind.value.capitalize(), exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
