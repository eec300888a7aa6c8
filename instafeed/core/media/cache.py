"""
Media entity cache.

Maps a media id to the single canonical MediaRecord for it. Repeated payloads
for the same id update that record in place, so any code still holding a
reference sees the newest data. The cache is unbounded and lives as long as
its owner (usually one InstagramClient); `clear()` is the explicit teardown.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from instafeed.core.errors import IdentityConsistencyError, MalformedResponseError
from instafeed.schemas.models import MediaRecord, RawMedia


def _as_raw(item: RawMedia | Mapping[str, Any]) -> RawMedia:
    if isinstance(item, RawMedia):
        return item
    try:
        return RawMedia.model_validate(item)
    except ValidationError as e:
        raise MalformedResponseError(f"Invalid media item: {e}") from e


class MediaCache:
    def __init__(self) -> None:
        self._records: dict[str, MediaRecord] = {}

    def resolve(self, item: RawMedia | Mapping[str, Any]) -> MediaRecord:
        """Return the canonical record for `item`, creating or updating it."""
        raw = _as_raw(item)
        record = self._records.get(raw.id)
        if record is None:
            record = MediaRecord.from_raw(raw)
            self._records[raw.id] = record
            return record

        if record.id != raw.id:
            raise IdentityConsistencyError(f"Cache slot {raw.id!r} holds record for media {record.id!r}")
        return record.update(raw)

    def resolve_all(self, items: Iterable[RawMedia | Mapping[str, Any]]) -> list[MediaRecord]:
        """Resolve many items; output order follows input order."""
        return [self.resolve(item) for item in items]

    def get(self, media_id: str) -> MediaRecord | None:
        return self._records.get(media_id)

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, media_id: object) -> bool:
        return media_id in self._records

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["MediaCache"]
