"""Pydantic models for cache configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from imgcache.config.defaults import (
    DEFAULT_CACHE_SUBDIR,
    DEFAULT_COALESCE_REQUESTS,
    DEFAULT_FILE_EXTENSION,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_RESOURCE_DIR,
    DEFAULT_STORAGE_ROOT,
    DEFAULT_TIMEOUT_MS,
)


class ImageCacheConfig(BaseModel):
    """Resolved settings for one ImageCache instance.

    ``local_storage`` selects the pipeline: True caches to disk, False loads
    straight from the network, None decides at construction by trying to
    create the cache directory.
    """

    storage_root: Path = DEFAULT_STORAGE_ROOT
    cache_subdir: str = DEFAULT_CACHE_SUBDIR
    file_extension: str = DEFAULT_FILE_EXTENSION
    local_storage: bool | None = None
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    max_concurrent_fetches: int = Field(default=DEFAULT_MAX_CONCURRENT_FETCHES, ge=1)
    coalesce_requests: bool = DEFAULT_COALESCE_REQUESTS
    resource_dir: Path = DEFAULT_RESOURCE_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("storage_root", "resource_dir", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        return value

    @field_validator("file_extension")
    @classmethod
    def _leading_dot(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"

    @property
    def cache_dir(self) -> Path:
        return self.storage_root / self.cache_subdir

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ImageCacheConfig:
        """Build from a merged config dict, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls(**known)
