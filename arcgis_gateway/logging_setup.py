"""
Logging configuration for the ArcGIS Server gateway.

Everything goes through the ``arcgis-gateway`` logger.  With ``debug`` the
urllib3 connection log is routed to the same handler, which is why every
record passes through :class:`TokenRedactingFilter` first: request URLs can
carry a ``token=`` query parameter.
"""

import logging
import re

try:
    import colorlog
    _COLORLOG_AVAILABLE = True
except ImportError:
    _COLORLOG_AVAILABLE = False

log = logging.getLogger("arcgis-gateway")

_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_DATEFMT = "%H:%M:%S"
_TOKEN_PARAM = re.compile(r"((?:^|[?&\s'\"])token=)([^&\s'\"]+)", re.IGNORECASE)


def mask(secret: "str | None", keep: int = 6) -> str:
    """Shorten a token or password for log output."""
    if not secret:
        return ""
    return secret[:keep] + "…" if len(secret) > keep else "…"


class TokenRedactingFilter(logging.Filter):
    """Rewrites ``token=<value>`` in a record's message to its masked form."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _TOKEN_PARAM.sub(lambda m: m.group(1) + mask(m.group(2)), message)
        if redacted != message:
            record.msg, record.args = redacted, None
        return True


def _build_handler() -> logging.Handler:
    if _COLORLOG_AVAILABLE:
        handler = colorlog.StreamHandler()
        handler.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s",
            datefmt=_DATEFMT,
            log_colors={
                "DEBUG":    "cyan",
                "INFO":     "green",
                "WARNING":  "yellow",
                "ERROR":    "red",
                "CRITICAL": "bold_red",
            },
        ))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    handler.addFilter(TokenRedactingFilter())
    return handler


def _setup_logging(debug: bool = False, quiet: bool = False) -> None:
    """
    Install a single handler on the package logger.

    *quiet* limits output to warnings and errors; *debug* wins over it and
    also attaches urllib3's connection log to the same handler.
    """
    level = logging.DEBUG if debug else logging.WARNING if quiet else logging.INFO
    log.setLevel(level)
    log.handlers.clear()
    handler = _build_handler()
    log.addHandler(handler)

    transport_log = logging.getLogger("urllib3")
    transport_log.handlers.clear()
    if debug:
        transport_log.setLevel(logging.DEBUG)
        transport_log.addHandler(handler)
        transport_log.propagate = False
    else:
        transport_log.setLevel(logging.WARNING)
        transport_log.propagate = True
