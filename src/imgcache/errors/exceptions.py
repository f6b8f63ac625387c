"""Custom exception hierarchy for imgcache."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# FetchError causes
RESPONSE_FAILED = "network response failed"
REQUEST_ERROR = "network request error"
REQUEST_TIMEOUT = "network request timeout"


class ImageCacheError(Exception):
    """Base exception for all imgcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class StorageError(ImageCacheError):
    """Cache directory or file could not be created or written.

    Examples: permission denied, disk full, parent path is a file.
    """

    def __init__(
        self,
        message: str = "",
        path: str | Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.original = original


class FetchError(ImageCacheError):
    """Network retrieval failed. The cache never retries.

    ``cause`` is one of RESPONSE_FAILED (non-200 status), REQUEST_ERROR
    (transport failure) or REQUEST_TIMEOUT.
    """

    def __init__(
        self,
        message: str = "",
        cause: str = REQUEST_ERROR,
        url: str | None = None,
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message or cause)
        self.cause = cause
        self.url = url
        self.http_status = http_status
        self.original = original

    @property
    def is_timeout(self) -> bool:
        return self.cause == REQUEST_TIMEOUT


class LoadError(ImageCacheError):
    """Image could not be decoded, from a local file or from raw bytes."""

    def __init__(
        self,
        message: str = "",
        source: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.original = original
