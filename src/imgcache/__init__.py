"""imgcache — remote images cached on local disk, with tracked in-memory handles."""

from imgcache.cache.stats import CacheStats, WarmResult
from imgcache.config.schema import ImageCacheConfig
from imgcache.core import ImageCache
from imgcache.errors.exceptions import FetchError, ImageCacheError, LoadError, StorageError
from imgcache.types import ImageHandle

__all__ = [
    "CacheStats",
    "FetchError",
    "ImageCache",
    "ImageCacheConfig",
    "ImageCacheError",
    "ImageHandle",
    "LoadError",
    "StorageError",
    "WarmResult",
]
