# src/cache/base_reference_cache.py — v1
"""Abstract reference cache interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bookfinder.core.models import Category


class BaseReferenceCache(ABC):
    """Per-category keyed store of fetched entity records.

    Implementations must tolerate concurrent get/put from many tasks (and
    threads). Concurrent writers to the same key resolve to last write wins.
    """

    @abstractmethod
    def get(self, category: Category, key: str) -> Any | None:
        """Return the record if present and younger than the TTL, else None."""

    @abstractmethod
    def put(self, category: Category, key: str, record: Any) -> None:
        """Insert or overwrite the entry, stamping the current time."""

    @abstractmethod
    def clear(self, category: Category | None = None) -> None:
        """Drop every entry, or only those of one category."""

    @abstractmethod
    def size(self, category: Category | None = None) -> int:
        """Number of stored entries, expired ones included."""
