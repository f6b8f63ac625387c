"""Bounded async worker pool for bulk preloading."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyPool:
    """Runs one coroutine per item with at most ``max_workers`` in flight."""

    def __init__(self, max_workers: int = 5) -> None:
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return self._max_workers

    async def process_batch(
        self,
        fn: Callable[[T], Awaitable[R]],
        items: Sequence[T],
    ) -> list[R | BaseException]:
        """Apply ``fn`` to every item concurrently.

        Returns one entry per item, in input order. A failed item yields its
        exception instead of a result; other items keep running.
        """
        # Semaphore is created per batch so it binds to the running loop
        semaphore = asyncio.Semaphore(self._max_workers)

        async def worker(item: T) -> R:
            async with semaphore:
                return await fn(item)

        results = await asyncio.gather(*(worker(i) for i in items), return_exceptions=True)

        for item, result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Item %s failed: %s", item, result)
        return list(results)
