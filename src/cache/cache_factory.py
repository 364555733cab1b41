# src/cache/cache_factory.py — v1
"""Factory for reference cache instantiation."""

from __future__ import annotations

from bookfinder.cache.base_reference_cache import BaseReferenceCache
from bookfinder.cache.memory_store import InMemoryReferenceCache
from bookfinder.config.settings import Settings


def create_reference_cache(settings: Settings | None = None) -> BaseReferenceCache:
    """Instantiate the reference cache configured by ``settings``.

    Args:
        settings: Application settings. Defaults to a 5-minute TTL, unbounded.

    Returns:
        A fresh, empty BaseReferenceCache. Callers share it across
        aggregations by injecting the same instance.
    """
    if settings is None:
        return InMemoryReferenceCache()
    return InMemoryReferenceCache(
        ttl_seconds=settings.reference_cache_ttl_seconds,
        max_entries=settings.reference_cache_max_entries,
    )
