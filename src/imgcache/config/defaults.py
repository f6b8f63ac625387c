"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default storage settings
DEFAULT_STORAGE_ROOT = Path.home() / ".imgcache"
DEFAULT_CACHE_SUBDIR = "img"
DEFAULT_FILE_EXTENSION = ".jpg"
DEFAULT_LOCAL_STORAGE: bool | None = None  # None = detect at construction

# Default network settings
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_CONCURRENT_FETCHES = 5
DEFAULT_COALESCE_REQUESTS = False

# Bundled resources
DEFAULT_RESOURCE_DIR = Path(__file__).resolve().parent.parent / "resources"
DEFAULT_IMAGE_RESOURCE = "SystemHead/1.png"
CHAT_ATLAS_RESOURCE = "Chat/Chat.png"
CHAT_MANIFEST_RESOURCE = "Chat/Chat.yaml"
CHAT_FRAME_PREFIX = "biaoqing_"
CHAT_FRAME_COUNT = 55

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "storage_root": DEFAULT_STORAGE_ROOT,
        "cache_subdir": DEFAULT_CACHE_SUBDIR,
        "file_extension": DEFAULT_FILE_EXTENSION,
        "local_storage": DEFAULT_LOCAL_STORAGE,
        "timeout_ms": DEFAULT_TIMEOUT_MS,
        "max_concurrent_fetches": DEFAULT_MAX_CONCURRENT_FETCHES,
        "coalesce_requests": DEFAULT_COALESCE_REQUESTS,
        "resource_dir": DEFAULT_RESOURCE_DIR,
        "log_level": DEFAULT_LOG_LEVEL,
    }
