"""Top-level entry point: ImageCache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx

from imgcache.cache.keys import Hasher, PathResolver, hash_url
from imgcache.cache.pipelines import (
    BytesDecoder,
    CachedPipeline,
    DirectPipeline,
    ImageFetcher,
)
from imgcache.cache.registry import HandleRegistry, release_deep
from imgcache.cache.stats import CacheStats, WarmResult
from imgcache.cache.store import LocalStore, PathDecoder
from imgcache.concurrency.pool import ConcurrencyPool
from imgcache.config.defaults import (
    CHAT_ATLAS_RESOURCE,
    CHAT_FRAME_COUNT,
    CHAT_FRAME_PREFIX,
    CHAT_MANIFEST_RESOURCE,
    DEFAULT_IMAGE_RESOURCE,
)
from imgcache.config.hierarchy import load_config_hierarchy
from imgcache.config.loader import load_frame_manifest
from imgcache.config.schema import ImageCacheConfig
from imgcache.errors.exceptions import ImageCacheError, LoadError, StorageError
from imgcache.net.client import Fetcher
from imgcache.types import ImageHandle
from imgcache.utils.image import crop_frames, decode_from_bytes, decode_from_path

logger = logging.getLogger(__name__)


class ImageCache:
    """Remote image cache with explicit lifecycle.

    Build one with :meth:`create`, share it through the application, and
    ``await cache.close()`` when done. Collaborators (hasher, decoders,
    fetcher or HTTP client) can be injected for other hosts and for tests.
    """

    def __init__(
        self,
        config: ImageCacheConfig | None = None,
        *,
        hasher: Hasher = hash_url,
        path_decoder: PathDecoder = decode_from_path,
        bytes_decoder: BytesDecoder = decode_from_bytes,
        fetcher: ImageFetcher | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or ImageCacheConfig()
        self._path_decoder = path_decoder

        self._owned_fetcher: Fetcher | None = None
        if fetcher is None:
            self._owned_fetcher = Fetcher(client=http_client, timeout_ms=self._config.timeout_ms)
            fetcher = self._owned_fetcher

        ext = self._config.file_extension
        self._resolver = PathResolver(self._config.cache_dir, hasher=hasher, extension=ext)
        self._store = LocalStore(self._config.cache_dir, decoder=path_decoder, extension=ext)

        if self._detect_local_storage():
            self._pipeline: CachedPipeline | DirectPipeline = CachedPipeline(
                self._resolver,
                self._store,
                fetcher,
                coalesce=self._config.coalesce_requests,
            )
        else:
            self._pipeline = DirectPipeline(fetcher, bytes_decoder)

        self._registry = HandleRegistry()
        self._default_image: ImageHandle | None = None
        self._chat_images: list[ImageHandle] = []
        self._stats = CacheStats()
        self._closed = False

    @classmethod
    def create(
        cls,
        config: ImageCacheConfig | None = None,
        **kwargs: Any,
    ) -> ImageCache:
        """Build a cache from ``config``, or from the config hierarchy if omitted.

        Keyword arguments matching config fields override resolved settings;
        the rest are passed to the constructor as collaborators.
        """
        fields = ImageCacheConfig.model_fields
        overrides = {k: kwargs.pop(k) for k in list(kwargs) if k in fields}
        if config is None:
            config = ImageCacheConfig.from_mapping(load_config_hierarchy(**overrides))
        elif overrides:
            config = ImageCacheConfig(**{**config.model_dump(), **overrides})
        return cls(config, **kwargs)

    # ── Properties ──

    @property
    def config(self) -> ImageCacheConfig:
        return self._config

    @property
    def local_storage(self) -> bool:
        return self._pipeline.uses_local_storage

    @property
    def registry(self) -> HandleRegistry:
        return self._registry

    @property
    def default_image(self) -> ImageHandle | None:
        return self._default_image

    @property
    def chat_images(self) -> list[ImageHandle]:
        return list(self._chat_images)

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Operations ──

    def resolve_local_path(self, url: str) -> Path:
        """Local file a URL is cached under (whether or not it exists yet)."""
        return self._resolver.resolve(url)

    async def init_default_image(self) -> None:
        """Load the bundled default image into the default slot.

        On failure the slot keeps its previous value (None after teardown).
        """
        self._check_open()
        path = self._config.resource_dir / DEFAULT_IMAGE_RESOURCE
        handle = await asyncio.to_thread(self._path_decoder, path)
        if self._default_image is not None and self._default_image is not handle:
            release_deep(self._default_image)
        self._default_image = handle
        logger.debug("Default image loaded from %s", path)

    async def load_url_image(self, url: str) -> ImageHandle | None:
        """Return a handle for ``url``; the empty string means the default image.

        The default image is returned as is, which is None until
        :meth:`init_default_image` has succeeded.
        """
        if not url:
            return self._default_image

        self._check_open()
        try:
            result = await self._pipeline.load(url)
        except ImageCacheError:
            self._stats.failures += 1
            raise

        if result.from_cache:
            self._stats.hits += 1
        else:
            self._stats.misses += 1
        self._registry.add(result.handle)
        return result.handle

    async def init_chat_images(self) -> list[ImageHandle]:
        """Load the chat sprite sheet and cut out its frames, in order."""
        self._check_open()
        atlas_path = self._config.resource_dir / CHAT_ATLAS_RESOURCE
        manifest_path = self._config.resource_dir / CHAT_MANIFEST_RESOURCE
        try:
            boxes = await asyncio.to_thread(load_frame_manifest, manifest_path)
        except (FileNotFoundError, ValueError) as e:
            raise LoadError(
                f"Cannot load chat manifest: {e}", source=str(manifest_path), original=e
            ) from e

        atlas = await asyncio.to_thread(self._path_decoder, atlas_path)
        names = [f"{CHAT_FRAME_PREFIX}{i}" for i in range(1, CHAT_FRAME_COUNT + 1)]
        try:
            frames = crop_frames(atlas, boxes, names)
        except LoadError:
            release_deep(atlas)
            raise
        if not frames:
            release_deep(atlas)

        self._release_chat_images()
        self._chat_images = frames
        logger.debug("Loaded %d chat frames from %s", len(frames), atlas_path)
        return list(frames)

    async def warm(
        self,
        urls: Sequence[str],
        max_concurrent: int | None = None,
    ) -> WarmResult:
        """Download every URL not already on disk. Failures are counted, not raised."""
        self._check_open()
        if not self.local_storage:
            raise StorageError("Cannot warm the cache: local storage is disabled")

        pool = ConcurrencyPool(max_workers=max_concurrent or self._config.max_concurrent_fetches)
        targets = [u for u in urls if u]
        result = WarmResult(no_url=len(urls) - len(targets))

        outcomes = await pool.process_batch(self._pipeline.prefetch, targets)
        for outcome in outcomes:
            if isinstance(outcome, ImageCacheError):
                result.failed += 1
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome:
                result.downloaded += 1
            else:
                result.cached += 1

        logger.info(
            "Warmed %d URLs: %d downloaded, %d cached, %d failed",
            result.total,
            result.downloaded,
            result.cached,
            result.failed,
        )
        return result

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics."""
        entries, size_bytes = 0, 0
        if self.local_storage:
            entries = len(self._store.entries())
            size_bytes = self._store.size_bytes()
        return CacheStats(
            entries=entries,
            size_mb=size_bytes / (1024 * 1024),
            tracked_handles=len(self._registry),
            hits=self._stats.hits,
            misses=self._stats.misses,
            failures=self._stats.failures,
        )

    def release_all(self) -> None:
        """Release every tracked handle, the default image and chat frames.

        Leaves the cache uninitialized but usable; calling it twice is a no-op.
        """
        count = self._registry.release_all()
        release_deep(self._default_image)
        self._default_image = None
        self._release_chat_images()
        self._stats = CacheStats()
        logger.info("Released %d cached image handles", count)

    async def close(self) -> None:
        if self._closed:
            return
        self.release_all()
        if self._owned_fetcher is not None:
            await self._owned_fetcher.close()
        self._closed = True

    async def __aenter__(self) -> ImageCache:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── Internals ──

    def _detect_local_storage(self) -> bool:
        if self._config.local_storage is not None:
            return self._config.local_storage
        try:
            self._store.ensure_cache_dir()
        except StorageError as e:
            logger.warning("Local image cache unavailable, loading from network: %s", e)
            return False
        return True

    def _release_chat_images(self) -> None:
        for frame in self._chat_images:
            release_deep(frame)
        self._chat_images = []

    def _check_open(self) -> None:
        if self._closed:
            raise ImageCacheError("ImageCache is closed")
