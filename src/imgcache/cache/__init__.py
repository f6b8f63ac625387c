"""Cache subsystem — URL-addressed disk store plus a handle registry."""

from imgcache.cache.keys import PathResolver, hash_url
from imgcache.cache.registry import HandleRegistry, release_deep
from imgcache.cache.stats import CacheStats, WarmResult
from imgcache.cache.store import LocalStore

__all__ = [
    "CacheStats",
    "HandleRegistry",
    "LocalStore",
    "PathResolver",
    "WarmResult",
    "hash_url",
    "release_deep",
]
