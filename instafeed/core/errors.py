"""
Typed errors + utilities for the API client.

Exports
-------
- InstagramError, ConfigurationError, IdentityConsistencyError
- TransportError, NetworkError, MalformedResponseError, ApiResponseError
- AssetLoadError
- TRANSPORT_ERRORS
- classify_transport_error(exc)
- transport_error_guard()
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import ValidationError

# =========================
# Exception types
# =========================


class InstagramError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(InstagramError):
    """Caller supplied an unusable configuration (e.g., no scope bits)."""


class IdentityConsistencyError(InstagramError):
    """A cached media record was asked to absorb data for another media id."""


class TransportError(InstagramError):
    """Base class for failures while issuing or decoding an API request."""


class NetworkError(TransportError):
    """HTTP/transport failure while loading a resource."""


class MalformedResponseError(TransportError):
    """The response could not be decoded into the expected payload shape."""


class ApiResponseError(TransportError):
    """The API answered with an error envelope (meta.code >= 400)."""

    def __init__(self, code: int, error_type: str | None = None, error_message: str | None = None) -> None:
        self.code = code
        self.error_type = error_type
        self.error_message = error_message
        super().__init__(f"API error {code}: {error_type or 'unknown'}: {error_message or ''}".rstrip(": "))


class AssetLoadError(InstagramError):
    """A single image asset could not be downloaded or decoded."""


# Selector tuple for grouped exception handling
TRANSPORT_ERRORS = (
    NetworkError,
    MalformedResponseError,
    ApiResponseError,
)

# =========================
# Classification helpers
# =========================


def classify_transport_error(exc: Exception) -> TransportError:
    """
    Map arbitrary exceptions raised inside the transport to a typed TransportError.

    Heuristics:
      - requests.* errors → NetworkError
      - OSError (sockets, DNS) → NetworkError
      - JSON decode / pydantic validation errors → MalformedResponseError
      - Any TransportError subclass → passed through
      - Fallback → TransportError
    """
    if isinstance(exc, TransportError):
        return exc

    import requests

    if isinstance(exc, requests.RequestException):
        return NetworkError(str(exc))

    if isinstance(exc, json.JSONDecodeError | ValidationError):
        return MalformedResponseError(f"{type(exc).__name__}: {exc}")

    if isinstance(exc, OSError):
        return NetworkError(f"{type(exc).__name__}: {exc}")

    return TransportError(f"{type(exc).__name__}: {exc}")


@contextmanager
def transport_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from transport internals."""
    try:
        yield
    except TRANSPORT_ERRORS:
        raise
    except InstagramError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_transport_error(exc) from exc


__all__ = [
    "InstagramError",
    "ConfigurationError",
    "IdentityConsistencyError",
    "TransportError",
    "NetworkError",
    "MalformedResponseError",
    "ApiResponseError",
    "AssetLoadError",
    "TRANSPORT_ERRORS",
    "classify_transport_error",
    "transport_error_guard",
]
