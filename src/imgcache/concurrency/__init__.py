"""Concurrency — bounded async pool for batch preloading."""

from imgcache.concurrency.pool import ConcurrencyPool

__all__ = ["ConcurrencyPool"]
