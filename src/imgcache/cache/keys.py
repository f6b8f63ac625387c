"""Cache key generation — local file paths addressed by a hash of the URL."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path

Hasher = Callable[[str], str]


def hash_url(url: str) -> str:
    """Hash a URL for use as a cache file name (MD5 hex digest)."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


class PathResolver:
    """Maps a URL to ``<cache_dir>/<hash(url)><extension>``.

    The mapping is pure and stable across runs; it is the cache's only
    consistency guarantee, so the hasher must be deterministic.
    """

    def __init__(
        self,
        cache_dir: Path,
        hasher: Hasher = hash_url,
        extension: str = ".jpg",
    ) -> None:
        self._cache_dir = cache_dir
        self._hasher = hasher
        self._extension = extension

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def resolve(self, url: str) -> Path:
        return self._cache_dir / f"{self._hasher(url)}{self._extension}"
