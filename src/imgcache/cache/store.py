"""Local file store for cached image bytes."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from pathlib import Path
from uuid import uuid4

from imgcache.errors.exceptions import StorageError
from imgcache.types import ImageHandle
from imgcache.utils.image import decode_from_path

logger = logging.getLogger(__name__)

PathDecoder = Callable[[Path], ImageHandle]


class LocalStore:
    """Cache directory with one file per URL.

    Writes land in a temporary sibling first and are renamed into place, so
    readers never see a half-written file.
    """

    def __init__(
        self,
        cache_dir: Path,
        decoder: PathDecoder = decode_from_path,
        extension: str = ".jpg",
    ) -> None:
        self._cache_dir = cache_dir
        self._decoder = decoder
        self._extension = extension

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def ensure_cache_dir(self) -> Path:
        """Return the cache directory, creating it if needed."""
        if self._cache_dir.is_dir():
            return self._cache_dir
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create cache directory {self._cache_dir}: {e}",
                path=self._cache_dir,
                original=e,
            ) from e
        logger.debug("Created cache directory %s", self._cache_dir)
        return self._cache_dir

    def exists(self, path: Path) -> bool:
        return path.is_file()

    async def write(self, path: Path, data: bytes) -> None:
        """Persist ``data`` at ``path``, replacing any existing file."""
        await asyncio.to_thread(self._write_sync, path, data)

    async def read_as_image(self, path: Path) -> ImageHandle:
        return await asyncio.to_thread(self._decoder, path)

    def entries(self) -> list[Path]:
        """Cached files, oldest first."""
        if not self._cache_dir.is_dir():
            return []
        stamped = []
        for p in self._cache_dir.glob(f"*{self._extension}"):
            # Files may vanish between glob and stat under concurrent clears
            with contextlib.suppress(FileNotFoundError):
                if p.is_file():
                    stamped.append((p.stat().st_mtime, p))
        return [p for _, p in sorted(stamped, key=lambda item: item[0])]

    def size_bytes(self) -> int:
        total = 0
        for p in self.entries():
            with contextlib.suppress(FileNotFoundError):
                total += p.stat().st_size
        return total

    def clear(self) -> int:
        """Delete every cached file. Returns the number removed."""
        removed = 0
        for path in self.entries():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Cannot remove {path}: {e}", path=path, original=e) from e
            removed += 1
        return removed

    def discard(self, path: Path) -> None:
        """Remove an unreadable cache file so the next request fetches again."""
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Cannot remove unreadable cache file %s: %s", path, e)
            return
        logger.info("Removed unreadable cache file %s", path)

    def _write_sync(self, path: Path, data: bytes) -> None:
        tmp_path = path.with_name(f".{path.stem}.tmp.{uuid4().hex}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise StorageError(f"Cannot write {path}: {e}", path=path, original=e) from e
        logger.debug("Wrote %d bytes to %s", len(data), path)
