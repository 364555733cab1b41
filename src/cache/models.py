# src/cache/models.py — v1
"""Reference cache models: CacheEntry."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """One cached entity record stamped with its fetch time.

    ``fetched_at`` is read from the cache clock (monotonic seconds by default),
    not wall-clock time.
    """

    model_config = ConfigDict(frozen=True)

    record: Any
    fetched_at: float

    def is_valid(self, now: float, ttl_seconds: float) -> bool:
        """An entry is valid iff its age is strictly below the TTL."""
        return (now - self.fetched_at) < ttl_seconds
