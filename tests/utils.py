"""
Single source of truth for test data, factories, and fakes.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import asyncio
import io
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from hashlib import sha256
from typing import Any
from urllib.parse import parse_qs, urlsplit

from instafeed.core.errors import AssetLoadError
from instafeed.schemas.models import MediaRecord, PreloadedAsset

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_CLIENT_ID = "client-123"
DEFAULT_TOKEN = "abc.def-456"
DEFAULT_PAGE_URL = "https://app.example.com/gallery"
CALLBACK_PARAM = "callback"


# -----------------------------
# Payload factories
# -----------------------------


def make_raw_media(
    media_id: str = "1",
    url: str | None = None,
    *,
    media_type: str = "image",
    **extra: Any,
) -> dict[str, Any]:
    """One element of an API `data` list."""
    item: dict[str, Any] = {
        "id": media_id,
        "type": media_type,
        "images": {
            "standard_resolution": {"url": url or f"https://cdn.example.com/{media_id}.jpg", "width": 640, "height": 640},
            "low_resolution": {"url": f"https://cdn.example.com/{media_id}_l.jpg", "width": 306, "height": 306},
            "thumbnail": {"url": f"https://cdn.example.com/{media_id}_t.jpg", "width": 150, "height": 150},
        },
        "link": f"https://example.com/p/{media_id}/",
        "caption": {"text": f"caption {media_id}"},
        "user": {"id": "99", "username": "someone"},
        "created_time": "1296710327",
        "likes": {"count": 3},
    }
    item.update(extra)
    return item


def make_payload(*items: Mapping[str, Any], code: int = 200) -> dict[str, Any]:
    return {"meta": {"code": code}, "data": list(items)}


def make_record(media_id: str = "1", url: str | None = None) -> MediaRecord:
    return MediaRecord(id=media_id, image_url=url or f"https://cdn.example.com/{media_id}.jpg")


def png_bytes(width: int = 8, height: int = 8) -> bytes:
    """Small RGB PNG generated with Pillow."""
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def make_asset(url: str, data: bytes = b"\x89PNG fake") -> PreloadedAsset:
    return PreloadedAsset(
        url=url,
        content_type="image/png",
        bytes_size=len(data),
        sha256=sha256(data).hexdigest(),
        width=8,
        height=8,
        fetched_at=datetime.now(timezone.utc),
        data=data,
    )


def callback_name_of(url: str) -> str:
    return parse_qs(urlsplit(url).query)[CALLBACK_PARAM][0]


# -----------------------------
# Fakes
# -----------------------------


class FakeScriptLoader:
    """
    Answers JSONP loads from memory.

    `payloads` maps a URL path suffix (e.g. "/media/popular") to the payload
    returned for it; unknown paths get an empty data list.
    """

    def __init__(self, payloads: Mapping[str, Any] | None = None, *, error: Exception | None = None) -> None:
        self.payloads = dict(payloads or {})
        self.error = error
        self.urls: list[str] = []

    def payload_for(self, url: str) -> Any:
        path = urlsplit(url).path
        for suffix, payload in self.payloads.items():
            if path.endswith(suffix):
                return payload
        return {"meta": {"code": 200}, "data": []}

    async def load(self, url: str) -> str:
        self.urls.append(url)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return f"/**/ {callback_name_of(url)}({json.dumps(self.payload_for(url))});"


class FakeImageLoader:
    """
    Image loader with a controllable schedule.

    With `gated=True` every load waits until `release(url)` is called, which
    lets tests hold a download in flight while other preload calls pile up.
    """

    def __init__(self, *, fail: set[str] | None = None, gated: bool = False) -> None:
        self.fail = set(fail or ())
        self.gated = gated
        self.calls: list[str] = []
        self._gates: dict[str, asyncio.Event] = {}

    def _gate(self, url: str) -> asyncio.Event:
        return self._gates.setdefault(url, asyncio.Event())

    def release(self, url: str) -> None:
        self._gate(url).set()

    async def load(self, url: str) -> PreloadedAsset:
        self.calls.append(url)
        if self.gated:
            await self._gate(url).wait()
        else:
            await asyncio.sleep(0)
        if url in self.fail:
            raise AssetLoadError("http_status:404")
        return make_asset(url)


class FakeResp:
    """Minimal stand-in for requests.Response (text and streaming)."""

    def __init__(self, *, status: int = 200, headers: dict[str, str] | None = None, body: bytes = b"", chunk: int = 1024):
        self.status_code = status
        self.headers = headers or {}
        self._body = body
        self._chunk = chunk
        self.encoding: str | None = "utf-8"
        self.closed = False

    @property
    def text(self) -> str:
        return self._body.decode(self.encoding or "utf-8")

    def iter_content(self, chunk_size: int = 1024):
        sz = max(1, min(chunk_size, self._chunk))
        for i in range(0, len(self._body), sz):
            yield self._body[i : i + sz]

    def close(self) -> None:
        self.closed = True
