# src/sources/base_source.py — v1
"""Abstract remote catalog source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookfinder.core.models import AuthorDetail, Category, EntityRecord, SearchResponse, WorkRecord


class BaseCatalogSource(ABC):
    """Unified interface for remote book catalogs.

    Implementations own their per-call timeout. Errors are reported with the
    core.errors hierarchy: EntityNotFound for missing records and
    TransportError for everything else (network, status, payload shape).
    """

    @abstractmethod
    async def fetch_entity(self, category: Category, key: str) -> EntityRecord:
        """Fetch one referenced entity by normalized key."""

    @abstractmethod
    async def fetch_authors_batch(
        self, filter_expression: str, limit: int
    ) -> list[AuthorDetail]:
        """Fetch many authors at once with a ``key:(K1 OR K2 ...)`` filter."""

    @abstractmethod
    async def fetch_work(self, work_id: str) -> WorkRecord:
        """Fetch one work with its reference lists."""

    @abstractmethod
    async def search_books(
        self,
        query: str,
        page: int = 1,
        limit: int = 20,
        language: str | None = None,
        sort: str | None = None,
    ) -> SearchResponse:
        """Full-text catalog search."""

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""

    async def __aenter__(self) -> BaseCatalogSource:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
