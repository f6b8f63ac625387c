"""Error handling — storage, fetch and load failures."""

from imgcache.errors.exceptions import (
    REQUEST_ERROR,
    REQUEST_TIMEOUT,
    RESPONSE_FAILED,
    FetchError,
    ImageCacheError,
    LoadError,
    StorageError,
)

__all__ = [
    "ImageCacheError",
    "StorageError",
    "FetchError",
    "LoadError",
    "RESPONSE_FAILED",
    "REQUEST_ERROR",
    "REQUEST_TIMEOUT",
]
