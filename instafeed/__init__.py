# instafeed/__init__.py
from instafeed.core.auth import Credentials, Scope
from instafeed.core.errors import (
    ApiResponseError,
    AssetLoadError,
    ConfigurationError,
    IdentityConsistencyError,
    InstagramError,
    MalformedResponseError,
    NetworkError,
    TransportError,
)
from instafeed.orchestrators.client import InstagramClient
from instafeed.schemas.models import ClientPolicy, MediaRecord, PreloadStatus

__all__ = [
    "InstagramClient",
    "Credentials",
    "Scope",
    "ClientPolicy",
    "MediaRecord",
    "PreloadStatus",
    "InstagramError",
    "ConfigurationError",
    "IdentityConsistencyError",
    "TransportError",
    "NetworkError",
    "MalformedResponseError",
    "ApiResponseError",
    "AssetLoadError",
]
