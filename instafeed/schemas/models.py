# instafeed/schemas/models.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from instafeed.core.errors import IdentityConsistencyError

# =========================
# Configuration
# =========================


class ClientPolicy(BaseModel):
    """
    Network policy for the API client.

    Defines where requests go, how the host loaders identify themselves, and
    how the JSONP callback parameter is named. Frozen so a single policy can
    be shared by the transport, the image loader and the orchestrator.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    base_url: str = Field(
        "https://api.instagram.com/v1",
        description="Base URL every API path is appended to.",
    )
    auth_url: str = Field(
        "https://api.instagram.com/oauth/authorize/",
        description="OAuth authorize endpoint the user is sent to when no token is held.",
    )
    timeout_s: float = Field(
        15.0,
        gt=0,
        description="Per-request HTTP timeout in seconds for script and image loads.",
    )
    user_agent: str = Field(
        "instafeed/0.1 (+asyncio)",
        description="User-Agent string used in HTTP requests.",
    )
    allow_non_200: bool = Field(
        False,
        description="If False, a script load with HTTP status >= 400 fails with NetworkError.",
    )
    callback_param: str = Field(
        "callback",
        min_length=1,
        description="Query parameter carrying the JSONP callback name.",
    )
    callback_prefix: str = Field(
        "_instagram_jsonp_cb_",
        min_length=1,
        description="Prefix of generated JSONP callback names.",
    )
    max_asset_bytes: int = Field(
        24 * 1024 * 1024,
        gt=0,
        description="Upper bound for a single preloaded image; larger assets fail to load.",
    )


# =========================
# API payload (inbound)
# =========================


class ImageVariant(BaseModel):
    """One rendition of an image as advertised by the API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., description="Absolute URL of the rendition.")
    width: int | None = Field(None, ge=1, description="Pixel width if advertised.")
    height: int | None = Field(None, ge=1, description="Pixel height if advertised.")


class ImageSet(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    standard_resolution: ImageVariant
    low_resolution: ImageVariant | None = None
    thumbnail: ImageVariant | None = None


class Caption(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = ""


class MediaUser(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    username: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class LikeSummary(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    count: int = Field(0, ge=0)


class RawMedia(BaseModel):
    """
    Validated view of one element of the response's `data` list.

    Only the fields the client consumes are declared; everything else the API
    sends is ignored. Numeric ids are coerced to strings so cache keys are
    stable regardless of how the payload was produced.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Stable media identifier.")
    type: str = Field("image", description='Media type as declared by the API, e.g. "image" or "video".')
    images: ImageSet
    link: str | None = None
    caption: Caption | None = None
    user: MediaUser | None = None
    created_time: str | None = None
    likes: LikeSummary | None = None

    @field_validator("id", "created_time", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


# =========================
# Canonical entities
# =========================


class MediaRecord(BaseModel):
    """
    Canonical in-memory representation of one remote image.

    Exactly one instance exists per id inside a MediaCache. Later payloads for
    the same id are folded into the instance via `update`, so every holder of
    a reference observes the newest data. `id` itself can never change.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str = Field(..., frozen=True, description="Stable identity key, unique within a cache.")
    image_url: str = Field(..., description="Standard-resolution asset URL (the preload unit).")
    width: int | None = Field(None, description="Standard-resolution width if advertised.")
    height: int | None = Field(None, description="Standard-resolution height if advertised.")
    thumbnail_url: str | None = Field(None, description="Thumbnail rendition URL, if any.")
    low_resolution_url: str | None = Field(None, description="Low-resolution rendition URL, if any.")
    link: str | None = Field(None, description="Public permalink of the media item.")
    caption: str | None = Field(None, description="Caption text, if any.")
    username: str | None = Field(None, description="Username of the owner, if included.")
    created_time: str | None = Field(None, description="Creation time as sent by the API (epoch seconds).")
    like_count: int | None = Field(None, description="Like count at the time of the last update.")

    @staticmethod
    def _derived_fields(raw: RawMedia) -> dict[str, Any]:
        std = raw.images.standard_resolution
        return {
            "image_url": std.url,
            "width": std.width,
            "height": std.height,
            "thumbnail_url": raw.images.thumbnail.url if raw.images.thumbnail else None,
            "low_resolution_url": raw.images.low_resolution.url if raw.images.low_resolution else None,
            "link": raw.link,
            "caption": raw.caption.text if raw.caption else None,
            "username": raw.user.username if raw.user else None,
            "created_time": raw.created_time,
            "like_count": raw.likes.count if raw.likes else None,
        }

    @classmethod
    def from_raw(cls, raw: RawMedia) -> MediaRecord:
        return cls(id=raw.id, **cls._derived_fields(raw))

    def update(self, raw: RawMedia) -> MediaRecord:
        """Fold newer data for the same media id into this instance."""
        if raw.id != self.id:
            raise IdentityConsistencyError(f"Tried to update media {self.id!r} with data for media {raw.id!r}")
        for name, value in self._derived_fields(raw).items():
            setattr(self, name, value)
        return self


# =========================
# Preload (public contracts)
# =========================


class PreloadStatus(str, Enum):
    """Lifecycle of one asset URL inside a PreloadCoordinator."""

    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PreloadedAsset(BaseModel):
    """
    An image whose bytes have been fetched into the process-local cache.

    `data` holds the raw body so callers can hand it to a renderer without a
    second download; it is left out of repr to keep logs readable.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., description="Source URL the bytes were fetched from.")
    content_type: str | None = Field(None, description="HTTP Content-Type (e.g., 'image/jpeg') if available.")
    bytes_size: int = Field(..., ge=0, description="Size of the body in bytes.")
    sha256: str = Field(..., min_length=32, max_length=128, description="Integrity hash of the body (hex).")
    width: int | None = Field(None, ge=1, description="Decoded pixel width.")
    height: int | None = Field(None, ge=1, description="Decoded pixel height.")
    fetched_at: datetime = Field(..., description="Timestamp when the download completed (UTC).")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal issues encountered while loading.")
    data: bytes = Field(b"", repr=False, description="The downloaded body.")
