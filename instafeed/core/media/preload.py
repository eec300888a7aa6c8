"""
Preload coordinator.

Purpose
-------
Make sure the standard-resolution bytes of a list of MediaRecords have been
fetched before telling the caller the list is ready, while downloading each
asset URL at most once for the lifetime of the coordinator.

Design
------
- Status map keyed by asset URL (not media id): two records sharing a URL
  are one preload unit.
- One download task per URL. Every `preload` call that needs a URL which is
  already in flight attaches to that task's completion instead of starting
  another download or skipping it.
- Each call owns a PreloadBarrier counting its slots; a slot arrives exactly
  once, when its URL reaches a terminal state.
- Failed downloads are terminal: they are logged and recorded in `failures`,
  and the barrier still advances. No retry.

Invariants
----------
- `preload` returns (and passes to `on_complete`) the very list it was given.
- An empty list completes on the next loop turn.
- All bookkeeping happens on the event-loop thread.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from instafeed.core.diagnostics import get_logger
from instafeed.schemas.models import MediaRecord, PreloadedAsset, PreloadStatus

from .loader import ImageLoader, RequestsImageLoader

logger = get_logger(__name__)

T = TypeVar("T")


class PreloadBarrier(Generic[T]):
    """Counts outstanding slots and resolves once with the original items."""

    def __init__(self, items: T, size: int) -> None:
        self.items = items
        self.remaining = size
        self._done: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        if size == 0:
            self._done.get_loop().call_soon(self._release)

    def arrive(self) -> None:
        if self.remaining <= 0:
            return
        self.remaining -= 1
        if self.remaining == 0:
            self._release()

    def _release(self) -> None:
        if not self._done.done():
            self._done.set_result(self.items)

    @property
    def done(self) -> bool:
        return self._done.done()

    async def wait(self) -> T:
        return await self._done


class PreloadCoordinator:
    def __init__(self, loader: ImageLoader | None = None) -> None:
        self.loader = loader or RequestsImageLoader()
        self._status: dict[str, PreloadStatus] = {}
        self._inflight: dict[str, asyncio.Task[None]] = {}
        self._assets: dict[str, PreloadedAsset] = {}
        self.failures: dict[str, str] = {}
        self.download_count = 0

    # ---------- Side channel ----------

    def status_of(self, url: str) -> PreloadStatus | None:
        return self._status.get(url)

    def asset_for(self, url: str) -> PreloadedAsset | None:
        return self._assets.get(url)

    def failed_urls(self, records: Iterable[MediaRecord]) -> list[str]:
        """Asset URLs among `records` whose download failed, first-seen order."""
        seen: dict[str, None] = {}
        for r in records:
            if self._status.get(r.image_url) is PreloadStatus.FAILED:
                seen.setdefault(r.image_url, None)
        return list(seen)

    # ---------- Public API ----------

    async def preload(
        self,
        records: list[MediaRecord],
        on_complete: Callable[[list[MediaRecord]], None] | None = None,
    ) -> list[MediaRecord]:
        """
        Wait until every record's image URL is terminal, then return `records`.

        `on_complete(records)` is invoked exactly once, right before returning.
        """
        barrier: PreloadBarrier[list[MediaRecord]] = PreloadBarrier(records, len(records))

        for record in records:
            url = record.image_url
            status = self._status.get(url)
            if status in (PreloadStatus.SUCCEEDED, PreloadStatus.FAILED):
                barrier.arrive()
                continue

            task = self._inflight.get(url)
            if task is None or task.done():
                task = self._start(url)
            task.add_done_callback(lambda _t, b=barrier: b.arrive())

        result = await barrier.wait()
        if on_complete is not None:
            on_complete(result)
        return result

    # ---------- Internals ----------

    def _start(self, url: str) -> asyncio.Task[None]:
        self._status[url] = PreloadStatus.IN_FLIGHT
        self.download_count += 1
        task = asyncio.get_running_loop().create_task(self._download(url))
        self._inflight[url] = task
        task.add_done_callback(lambda t, u=url: self._forget(u, t))
        return task

    def _forget(self, url: str, task: asyncio.Task[None]) -> None:
        # a task cancelled before its first step never runs _download's cleanup
        if self._inflight.get(url) is task:
            del self._inflight[url]
        if task.cancelled() and self._status.get(url) is PreloadStatus.IN_FLIGHT:
            del self._status[url]

    async def _download(self, url: str) -> None:
        try:
            asset = await self.loader.load(url)
        except asyncio.CancelledError:
            self._status.pop(url, None)
            raise
        except Exception as exc:  # noqa: BLE001
            self._status[url] = PreloadStatus.FAILED
            self.failures[url] = str(exc) or type(exc).__name__
            logger.warning("Failed to preload %s: %s", url, self.failures[url])
        else:
            self._assets[url] = asset
            self._status[url] = PreloadStatus.SUCCEEDED
            logger.debug("Preloaded %s (%d bytes)", url, asset.bytes_size)
        finally:
            self._inflight.pop(url, None)


__all__ = ["PreloadBarrier", "PreloadCoordinator"]
