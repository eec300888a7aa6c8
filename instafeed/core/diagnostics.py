"""
Logging / debug helpers.

All loggers live under the `instafeed` namespace so applications can tune the
whole package with one `logging.getLogger("instafeed")` call. A rotating debug
file is opt-in (INSTAFEED_DEBUG=1 or an explicit `configure_debug_log`).
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "instafeed"
DEFAULT_DEBUG_LOG = os.path.join("logs", "instafeed_debug.log")

_DEBUG_HANDLER: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def debug_enabled() -> bool:
    return os.getenv("INSTAFEED_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def configure_debug_log(path: str = DEFAULT_DEBUG_LOG) -> logging.Logger:
    """Attach a rotating file handler to the package logger (once)."""
    global _DEBUG_HANDLER
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    if _DEBUG_HANDLER is not None:
        return logger

    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    except OSError:
        # don't fail just because the log file can't be opened
        return logger

    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="(%Y-%m-%d %H:%M:%S)",
        )
    )
    logger.addHandler(handler)
    _DEBUG_HANDLER = handler
    return logger


_SECRET_PARAM = re.compile(r"(?P<key>(?:^|[?&#])access_token=)[^&#]*")


def redact_url(url: str) -> str:
    """Mask the access_token query/fragment parameter of a URL."""
    return _SECRET_PARAM.sub(r"\g<key>[REDACTED]", url)


__all__ = [
    "ROOT_LOGGER_NAME",
    "DEFAULT_DEBUG_LOG",
    "get_logger",
    "debug_enabled",
    "configure_debug_log",
    "redact_url",
]
