# src/core/result.py — v1
"""Result values for entity fetches.

Missing or unavailable reference data is an expected, high-frequency outcome,
so fetch helpers return one of these instead of raising. Call sites match on
the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

from bookfinder.core.models import Category

T = TypeVar("T")


@dataclass(frozen=True)
class Fetched(Generic[T]):
    """Successful fetch. ``from_cache`` is True when no remote call was made."""

    category: Category
    key: str
    record: T
    from_cache: bool = False


@dataclass(frozen=True)
class EntityFetchFailure:
    """A single entity could not be resolved; it is omitted from the bundle."""

    category: Category
    key: str
    reason: str


@dataclass(frozen=True)
class BatchFetchFailure:
    """The author batch call failed as a whole; per-author fallback follows."""

    keys: tuple[str, ...]
    reason: str


@dataclass(frozen=True)
class BatchFetched(Generic[T]):
    """Records returned by a successful batch call, keyed by normalized key."""

    records: dict[str, T] = field(default_factory=dict)


FetchResult = Union[Fetched[T], EntityFetchFailure]
BatchResult = Union[BatchFetched[T], BatchFetchFailure]
