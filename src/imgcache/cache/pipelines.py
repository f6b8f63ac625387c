"""Load pipelines — how a non-empty URL becomes an image handle.

The cache picks one pipeline at construction:

* CachedPipeline: check the local file, fetch and persist on a miss, then
  decode from the local file.
* DirectPipeline: fetch and decode in memory, nothing is persisted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import NamedTuple, Protocol

from imgcache.cache.keys import PathResolver
from imgcache.cache.store import LocalStore
from imgcache.errors.exceptions import LoadError, StorageError
from imgcache.types import ImageHandle

logger = logging.getLogger(__name__)

BytesDecoder = Callable[[bytes, str], ImageHandle]


class ImageFetcher(Protocol):
    async def fetch(self, url: str, timeout_ms: int | None = None) -> bytes: ...


class LoadResult(NamedTuple):
    handle: ImageHandle
    from_cache: bool


class CachedPipeline:
    """Check-then-fetch-then-decode against the local store.

    With ``coalesce=False`` concurrent misses for the same URL each fetch and
    write (last write wins). With ``coalesce=True`` they share one in-flight
    fetch+write; every caller still decodes its own handle.
    """

    uses_local_storage = True

    def __init__(
        self,
        resolver: PathResolver,
        store: LocalStore,
        fetcher: ImageFetcher,
        coalesce: bool = False,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._fetcher = fetcher
        self._coalesce = coalesce
        self._in_flight: dict[str, asyncio.Task[None]] = {}

    async def load(self, url: str) -> LoadResult:
        self._store.ensure_cache_dir()
        path = self._resolver.resolve(url)
        from_cache = self._store.exists(path)
        if from_cache:
            logger.debug("Cache hit for %s -> %s", url, path)
        else:
            await self._download(url)
        try:
            handle = await self._store.read_as_image(path)
        except LoadError:
            self._store.discard(path)
            raise
        return LoadResult(handle, from_cache)

    async def prefetch(self, url: str) -> bool:
        """Make sure the URL is on disk. Returns True if it had to be fetched."""
        self._store.ensure_cache_dir()
        if self._store.exists(self._resolver.resolve(url)):
            return False
        await self._download(url)
        return True

    async def _download(self, url: str) -> None:
        if not self._coalesce:
            await self._fetch_and_write(url)
            return

        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_write(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda done: self._forget(url, done))
        else:
            logger.debug("Joining in-flight download of %s", url)
        await asyncio.shield(task)

    async def _fetch_and_write(self, url: str) -> None:
        path = self._resolver.resolve(url)
        data = await self._fetcher.fetch(url)
        await self._store.write(path, data)
        logger.info("Cached %s (%d bytes) at %s", url, len(data), path)

    def _forget(self, url: str, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(url) is task:
            del self._in_flight[url]


class DirectPipeline:
    """Fetch and decode in memory, for hosts without writable storage."""

    uses_local_storage = False

    def __init__(self, fetcher: ImageFetcher, decoder: BytesDecoder) -> None:
        self._fetcher = fetcher
        self._decoder = decoder

    async def load(self, url: str) -> LoadResult:
        data = await self._fetcher.fetch(url)
        handle = await asyncio.to_thread(self._decoder, data, url)
        return LoadResult(handle, False)

    async def prefetch(self, url: str) -> bool:
        raise StorageError(f"Cannot preload {url}: local storage is disabled")
