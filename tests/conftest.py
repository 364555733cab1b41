# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory catalog source with latency and failure injection, a
controllable clock and sample works. No network access.
"""

from __future__ import annotations

import asyncio
from collections import Counter

import pytest

from bookfinder.cache.memory_store import InMemoryReferenceCache
from bookfinder.core.errors import EntityNotFound, TransportError
from bookfinder.core.keys import normalize_author_key
from bookfinder.core.models import (
    RECORD_TYPES,
    AuthorDetail,
    AuthorReference,
    Category,
    SearchResponse,
    WorkRecord,
)
from bookfinder.sources.base_source import BaseCatalogSource


class FakeCatalogSource(BaseCatalogSource):
    """In-memory catalog.

    Every entity exists unless its key is listed in ``missing`` (raises
    EntityNotFound) or ``broken`` (raises TransportError). Records are named
    ``"<Category> <key>"`` unless ``names`` overrides them.
    """

    def __init__(
        self,
        missing: set[str] | None = None,
        broken: set[str] | None = None,
        names: dict[str, str] | None = None,
        latencies: dict[str, float] | None = None,
        batch_error: Exception | None = None,
        batch_latency: float = 0.0,
        works: dict[str, WorkRecord] | None = None,
    ) -> None:
        self.missing = missing or set()
        self.broken = broken or set()
        self.names = names or {}
        self.latencies = latencies or {}
        self.batch_error = batch_error
        self.batch_latency = batch_latency
        self.works = works or {}
        self.entity_calls: Counter[tuple[Category, str]] = Counter()
        self.batch_calls: list[tuple[str, int]] = []
        self.closed = False

    @property
    def total_calls(self) -> int:
        return sum(self.entity_calls.values()) + len(self.batch_calls)

    async def fetch_entity(self, category, key):
        self.entity_calls[(category, key)] += 1
        await asyncio.sleep(self.latencies.get(key, 0))
        if key in self.missing:
            raise EntityNotFound(category.value, key)
        if key in self.broken:
            raise TransportError(f"connection reset for {key}")
        name = self.names.get(key, f"{category.value.title()} {key}")
        return RECORD_TYPES[category](key=f"/{category.path}/{key}", name=name)

    async def fetch_authors_batch(self, filter_expression, limit):
        self.batch_calls.append((filter_expression, limit))
        await asyncio.sleep(self.batch_latency)
        if self.batch_error is not None:
            raise self.batch_error
        inner = filter_expression[len("key:("):-1]
        records = []
        for qualified in inner.split(" OR "):
            key = normalize_author_key(qualified)
            if key in self.missing or key in self.broken:
                continue
            records.append(
                AuthorDetail(key=qualified, name=self.names.get(key, f"Author {key}"))
            )
        return records[:limit]

    async def fetch_work(self, work_id):
        bare = work_id.strip("/").rsplit("/", 1)[-1].removesuffix(".json")
        if bare not in self.works:
            raise EntityNotFound("work", bare)
        return self.works[bare]

    async def search_books(self, query, page=1, limit=20, language=None, sort=None):
        return SearchResponse(numFound=0, start=0, docs=[])

    async def aclose(self):
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# === FIXTURES ===


@pytest.fixture
def fake_source() -> FakeCatalogSource:
    return FakeCatalogSource()


@pytest.fixture
def make_source() -> type[FakeCatalogSource]:
    """The FakeCatalogSource class, for tests that configure their own."""
    return FakeCatalogSource


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryReferenceCache:
    return InMemoryReferenceCache(ttl_seconds=300.0, clock=clock)


@pytest.fixture
def sample_work() -> WorkRecord:
    """A work referencing every category once or twice."""
    return WorkRecord(
        key="/works/OL45804W",
        title="Fantastic Mr Fox",
        first_publish_date="October 1, 1974",
        covers=[6498519],
        isbn_13=["9780140328721"],
        authors=[
            AuthorReference(key="/authors/OL34184A", name="Roald Dahl"),
            AuthorReference(key="/authors/OL7A"),
        ],
        subjects=["/subjects/fiction.json", "/subjects/foxes.json"],
        subject_places=["/places/england.json"],
        subject_people=["/people/mr_fox.json"],
        subject_times=["/times/20th_century.json"],
        publishers=["Puffin"],
    )


@pytest.fixture
def empty_work() -> WorkRecord:
    return WorkRecord(key="/works/OL1W", title="Untitled")
