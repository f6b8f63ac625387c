"""Handle registry — every decoded handle, tracked once, released together."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from imgcache.types import ImageHandle

logger = logging.getLogger(__name__)


def release_deep(handle: ImageHandle | None) -> None:
    """Release a handle and everything it transitively depends on.

    ``None`` and already released handles are no-ops, so shared
    dependencies may be reached more than once.
    """
    if handle is None:
        return
    seen: set[int] = set()
    stack = [handle]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        current.release()
        stack.extend(current.dependencies)


class HandleRegistry:
    """Insertion-ordered set of handles, deduplicated by identity."""

    def __init__(self) -> None:
        self._handles: list[ImageHandle] = []
        self._ids: set[int] = set()

    def add(self, handle: ImageHandle) -> bool:
        """Track a handle. Returns False if the same object is already tracked."""
        if id(handle) in self._ids:
            return False
        self._ids.add(id(handle))
        self._handles.append(handle)
        return True

    def release_all(self) -> int:
        """Release every tracked handle, then forget them. Returns the count."""
        count = len(self._handles)
        for handle in self._handles:
            release_deep(handle)
        self.clear()
        if count:
            logger.debug("Released %d tracked image handles", count)
        return count

    def clear(self) -> None:
        self._handles.clear()
        self._ids.clear()

    def __contains__(self, handle: object) -> bool:
        return id(handle) in self._ids

    def __iter__(self) -> Iterator[ImageHandle]:
        return iter(list(self._handles))

    def __len__(self) -> int:
        return len(self._handles)
