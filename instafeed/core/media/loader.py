# instafeed/core/media/loader.py

from __future__ import annotations

import asyncio
import io
from datetime import datetime, timezone
from hashlib import sha256
from typing import Protocol, runtime_checkable

import requests

from instafeed.core.errors import AssetLoadError
from instafeed.schemas.models import ClientPolicy, PreloadedAsset

_STREAM_CHUNK = 256 * 1024  # 256 KiB


@runtime_checkable
class ImageLoader(Protocol):
    """
    Protocol for fetching one image asset.

    `load` either returns the fetched asset or raises AssetLoadError. It is
    called at most once per URL by a PreloadCoordinator.
    """

    async def load(self, url: str) -> PreloadedAsset: ...


def _probe_dimensions(data: bytes) -> tuple[int, int]:
    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(io.BytesIO(data)) as im:
            return int(im.width), int(im.height)
    except (UnidentifiedImageError, OSError) as e:
        raise AssetLoadError(f"image_decode_error:{type(e).__name__}") from e


class RequestsImageLoader:
    """Streams image bytes with `requests` on a worker thread and validates them with Pillow."""

    def __init__(self, policy: ClientPolicy | None = None) -> None:
        self._policy = policy or ClientPolicy()

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._policy.user_agent, "Accept": "image/*", "Connection": "close"}

    def _fetch(self, url: str) -> PreloadedAsset:
        try:
            resp = requests.get(url, headers=self._headers(), timeout=self._policy.timeout_s, stream=True)
        except requests.RequestException as e:
            raise AssetLoadError(f"network_error:{type(e).__name__}") from e

        try:
            if resp.status_code >= 400:
                raise AssetLoadError(f"http_status:{resp.status_code}")

            content_type = resp.headers.get("Content-Type")
            ct = content_type.split(";", 1)[0].strip().lower() if content_type else None
            if ct is not None and not ct.startswith("image/"):
                raise AssetLoadError(f"not_an_image:{ct}")

            buf = bytearray()
            for chunk in resp.iter_content(chunk_size=_STREAM_CHUNK):
                if chunk:
                    buf.extend(chunk)
                if len(buf) > self._policy.max_asset_bytes:
                    raise AssetLoadError(f"too_large:>{self._policy.max_asset_bytes}")
        except requests.RequestException as e:
            raise AssetLoadError(f"network_error:{type(e).__name__}") from e
        finally:
            resp.close()

        data = bytes(buf)
        if not data:
            raise AssetLoadError("empty_body")

        warnings: list[str] = []
        if ct is None:
            warnings.append("missing_content_type")
        width, height = _probe_dimensions(data)

        return PreloadedAsset(
            url=url,
            content_type=ct,
            bytes_size=len(data),
            sha256=sha256(data).hexdigest(),
            width=width,
            height=height,
            fetched_at=datetime.now(timezone.utc),
            warnings=warnings,
            data=data,
        )

    async def load(self, url: str) -> PreloadedAsset:
        return await asyncio.to_thread(self._fetch, url)


__all__ = ["ImageLoader", "RequestsImageLoader"]
