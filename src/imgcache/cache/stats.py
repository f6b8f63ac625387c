"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    size_mb: float = 0.0
    tracked_handles: int = 0
    hits: int = 0
    misses: int = 0
    failures: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class WarmResult(BaseModel):
    """Outcome of preloading a batch of URLs."""

    cached: int = 0
    downloaded: int = 0
    failed: int = 0
    no_url: int = 0

    @property
    def total(self) -> int:
        return self.cached + self.downloaded + self.failed + self.no_url
