"""
Media Request Orchestrator (InstagramClient)

Purpose
-------
Compose the pieces behind the three public read operations:
  1) build an authorized endpoint URL (token beats client id),
  2) issue the JSONP request through the transport,
  3) keep only `type == "image"` items and resolve each to its canonical
     MediaRecord (input order preserved),
  4) hand the list to the caller right away, or after the preload barrier.

Design
------
- The client owns its MediaCache and PreloadCoordinator unless they are
  injected; pass the same instances to several clients to share them.
- Every operation is a coroutine that also accepts a callback, so both
  `records = await client.get_feed("self")` and callback-style code work.
- `authenticate` is synchronous: it either reports an existing token or
  hands the authorize URL to a navigator (default: `webbrowser.open`).

Usage
-----
    client = InstagramClient("CLIENT_ID", page_url="https://app.example/#access_token=abc")
    images = await client.get_feed("self", preload=True)
"""

from __future__ import annotations

import webbrowser
from collections.abc import Callable, Mapping
from typing import Any

from instafeed.core.auth import Credentials, Scope, build_authorize_url
from instafeed.core.diagnostics import get_logger
from instafeed.core.errors import ApiResponseError
from instafeed.core.media import MediaCache, PreloadCoordinator, RequestsImageLoader
from instafeed.core.transport import JsonpTransport, build_api_url
from instafeed.schemas.models import ClientPolicy, MediaRecord

logger = get_logger(__name__)

MediaCallback = Callable[[list[MediaRecord]], None]


def select_images(payload: Any) -> list[Mapping[str, Any]]:
    """Items of `payload["data"]` declared as images; anything else is dropped."""
    if not isinstance(payload, Mapping):
        return []
    data = payload.get("data")
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, Mapping) and item.get("type") == "image"]


def check_meta(payload: Any) -> None:
    """Raise ApiResponseError when the response carries an error envelope."""
    if not isinstance(payload, Mapping):
        return
    meta = payload.get("meta")
    if not isinstance(meta, Mapping):
        return
    try:
        code = int(meta.get("code", 200))
    except (TypeError, ValueError):
        return
    if code >= 400:
        raise ApiResponseError(code, meta.get("error_type"), meta.get("error_message"))


class InstagramClient:
    def __init__(
        self,
        client_id: str,
        *,
        page_url: str = "",
        policy: ClientPolicy | None = None,
        transport: JsonpTransport | None = None,
        cache: MediaCache | None = None,
        preloader: PreloadCoordinator | None = None,
        navigator: Callable[[str], Any] | None = None,
    ) -> None:
        self.policy = policy or ClientPolicy()
        self.page_url = page_url
        self.credentials = Credentials.from_page_url(client_id, page_url)
        self.transport = transport or JsonpTransport(policy=self.policy)
        self.cache = cache if cache is not None else MediaCache()
        self.preloader = preloader or PreloadCoordinator(RequestsImageLoader(self.policy))
        self._navigate = navigator or webbrowser.open

    @property
    def client_id(self) -> str:
        return self.credentials.client_id

    @property
    def access_token(self) -> str | None:
        return self.credentials.access_token

    def get_url(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        """Build an API endpoint URL carrying the access token or, failing that, the client id."""
        query: dict[str, Any] = dict(params or {})
        query.update(self.credentials.auth_params())
        return build_api_url(self.policy.base_url, path, query)

    def authenticate(self, scope: int) -> bool:
        """
        Ensure the user is authenticated.

        Returns True if a token is already held. Otherwise sends the user to the
        authorize endpoint with `page_url` as redirect URI and returns False.
        Raises ConfigurationError for a scope with no bits set or an empty `page_url`.
        """
        if self.credentials.is_authenticated:
            return True

        url = build_authorize_url(
            client_id=self.client_id,
            redirect_uri=self.page_url,
            scope=scope,
            auth_url=self.policy.auth_url,
        )
        logger.info("Redirecting to authorize endpoint (scope=%s)", Scope(int(scope)))
        self._navigate(url)
        return False

    async def _media_request(self, path: str, callback: MediaCallback | None, preload: bool) -> list[MediaRecord]:
        payload = await self.transport.request(self.get_url(path))
        check_meta(payload)
        images = self.cache.resolve_all(select_images(payload))
        logger.debug("%s: %d image(s)", path, len(images))

        if preload:
            return await self.preloader.preload(images, callback)
        if callback is not None:
            callback(images)
        return images

    async def get_feed(self, user: str, callback: MediaCallback | None = None, *, preload: bool = False) -> list[MediaRecord]:
        """Images the user recently posted. Pass "self" for the authenticated user."""
        return await self._media_request(f"/users/{user}/media/recent", callback, preload)

    async def get_likes(self, user: str, callback: MediaCallback | None = None, *, preload: bool = False) -> list[MediaRecord]:
        """Images the user liked recently. Pass "self" for the authenticated user."""
        return await self._media_request(f"/users/{user}/media/liked", callback, preload)

    async def get_top_images(self, callback: MediaCallback | None = None, *, preload: bool = False) -> list[MediaRecord]:
        """Images that are the most popular right now."""
        return await self._media_request("/media/popular", callback, preload)


__all__ = ["InstagramClient", "select_images", "check_meta"]
