# src/aggregation/aggregator.py — v1
"""Reference aggregator: resolve every entity a work references, concurrently.

For one WorkRecord:
  - authors are served from cache, then fetched in one batched author search
    per chunk of missing keys, chunks running side by side, falling back to one
    call per author when that chunk's batch fails;
  - subjects, places, people, times and publishers get one task per distinct
    key (cache first, remote call on miss);
  - every task runs under a single asyncio.TaskGroup, so latency is bounded
    by the slowest call and cancelling the caller cancels every fetch.

A failure to resolve one entity only removes that entity from the bundle.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Iterator

from pydantic import ValidationError

from bookfinder.cache.base_reference_cache import BaseReferenceCache
from bookfinder.cache.memory_store import InMemoryReferenceCache
from bookfinder.config.settings import Settings
from bookfinder.core.errors import AggregationFailure, CatalogSourceError
from bookfinder.core.keys import (
    author_filter_expression,
    dedupe_keys,
    normalize_author_key,
    normalize_publisher_key,
    normalize_subject_key,
)
from bookfinder.core.models import AuthorDetail, Category, ReferenceBundle, WorkRecord
from bookfinder.core.result import (
    BatchFetched,
    BatchFetchFailure,
    BatchResult,
    EntityFetchFailure,
    Fetched,
    FetchResult,
)
from bookfinder.logging.context import clear_context, set_category_context, set_work_context
from bookfinder.sources.base_source import BaseCatalogSource

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_BATCH_LIMIT = 100


def reference_plan(work: WorkRecord) -> dict[Category, list[str]]:
    """Distinct normalized keys per category, in first-seen order.

    Empty categories are left out.
    """
    plan = {
        Category.AUTHOR: dedupe_keys((a.key for a in work.authors), normalize_author_key),
        Category.SUBJECT: dedupe_keys(work.subjects, normalize_subject_key),
        Category.PLACE: dedupe_keys(work.subject_places, normalize_subject_key),
        Category.PERSON: dedupe_keys(work.subject_people, normalize_subject_key),
        Category.TIME: dedupe_keys(work.subject_times, normalize_subject_key),
        Category.PUBLISHER: dedupe_keys(work.publishers, normalize_publisher_key),
    }
    return {category: list(keys) for category, keys in plan.items() if keys}


class ReferenceAggregator:
    """Resolve a work's references into a ReferenceBundle.

    Args:
        source: Remote catalog used on cache misses.
        cache: Shared reference cache. A fresh in-memory cache if None.
        author_batch_enabled: Try the batched author search before per-author calls.
        author_batch_limit: Max keys per batched author search.
    """

    def __init__(
        self,
        source: BaseCatalogSource,
        cache: BaseReferenceCache | None = None,
        author_batch_enabled: bool = True,
        author_batch_limit: int = DEFAULT_AUTHOR_BATCH_LIMIT,
    ) -> None:
        self._source = source
        self._cache = cache if cache is not None else InMemoryReferenceCache()
        self._author_batch_enabled = author_batch_enabled
        self._author_batch_limit = max(1, author_batch_limit)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        source: BaseCatalogSource,
        cache: BaseReferenceCache | None = None,
    ) -> ReferenceAggregator:
        if cache is None:
            cache = InMemoryReferenceCache(
                ttl_seconds=settings.reference_cache_ttl_seconds,
                max_entries=settings.reference_cache_max_entries,
            )
        return cls(
            source=source,
            cache=cache,
            author_batch_enabled=settings.author_batch_enabled,
            author_batch_limit=settings.author_batch_max_limit,
        )

    @property
    def source(self) -> BaseCatalogSource:
        return self._source

    @property
    def cache(self) -> BaseReferenceCache:
        """The reference cache, for pre-warming or inspection."""
        return self._cache

    async def resolve_references(self, work: WorkRecord) -> ReferenceBundle:
        """Resolve all references of ``work``.

        Returns:
            A new ReferenceBundle holding every entity that could be resolved.

        Raises:
            AggregationFailure: If the concurrent join itself fails.
            asyncio.CancelledError: If the calling task is cancelled.
        """
        bundle = ReferenceBundle()
        plan = reference_plan(work)
        if not plan:
            logger.debug("Work %s has no references", work.key)
            return bundle

        set_work_context(work.key, uuid.uuid4().hex[:12])
        start_ns = time.monotonic_ns()
        try:
            author_task: asyncio.Task[list[FetchResult]] | None = None
            entity_tasks: list[asyncio.Task[FetchResult]] = []
            try:
                async with asyncio.TaskGroup() as tg:
                    for category, keys in plan.items():
                        if category is Category.AUTHOR:
                            author_task = tg.create_task(self._resolve_authors(keys))
                            continue
                        for key in keys:
                            entity_tasks.append(
                                tg.create_task(self._resolve_entity(category, key))
                            )
            except ExceptionGroup as eg:
                logger.error("Reference resolution aborted for %s: %s", work.key, eg)
                raise AggregationFailure(work.key, eg) from eg

            results: list[FetchResult] = [t.result() for t in entity_tasks]
            if author_task is not None:
                results.extend(author_task.result())

            failures = self._merge(bundle, results)
            logger.info(
                "Resolved %d/%d references for %s in %dms (%d unavailable)",
                bundle.total_resolved,
                sum(len(keys) for keys in plan.values()),
                work.key,
                (time.monotonic_ns() - start_ns) // 1_000_000,
                len(failures),
            )
            return bundle
        finally:
            clear_context()

    # --- Merge ---

    @staticmethod
    def _merge(
        bundle: ReferenceBundle, results: list[FetchResult]
    ) -> list[EntityFetchFailure]:
        failures: list[EntityFetchFailure] = []
        for result in results:
            match result:
                case Fetched(category=category, key=key, record=record):
                    bundle.for_category(category)[key] = record
                case EntityFetchFailure():
                    failures.append(result)
        return failures

    # --- Per-entity ---

    async def _resolve_entity(self, category: Category, key: str) -> FetchResult:
        set_category_context(category.value)
        return await self._fetch_entity(category, key)

    async def _fetch_entity(self, category: Category, key: str) -> FetchResult:
        """Cache lookup, then one remote call on miss. Never raises source errors."""
        cached = self._cache.get(category, key)
        if cached is not None:
            return Fetched(category, key, cached, from_cache=True)
        try:
            record = await self._source.fetch_entity(category, key)
        except (CatalogSourceError, ValidationError) as e:
            logger.debug("%s %r unavailable: %s", category, key, e)
            return EntityFetchFailure(category, key, str(e))
        self._cache.put(category, key, record)
        return Fetched(category, key, record)

    # --- Authors ---

    async def _resolve_authors(self, keys: list[str]) -> list[FetchResult]:
        set_category_context(Category.AUTHOR.value)
        results: list[FetchResult] = []
        missing: list[str] = []
        for key in keys:
            cached = self._cache.get(Category.AUTHOR, key)
            if cached is not None:
                results.append(Fetched(Category.AUTHOR, key, cached, from_cache=True))
            else:
                missing.append(key)
        if not missing:
            return results

        if not self._author_batch_enabled:
            results.extend(await self._fetch_authors_individually(missing))
            return results

        async with asyncio.TaskGroup() as tg:
            chunk_tasks = [
                tg.create_task(self._resolve_author_chunk(chunk))
                for chunk in _chunks(missing, self._author_batch_limit)
            ]
        for task in chunk_tasks:
            results.extend(task.result())
        return results

    async def _resolve_author_chunk(self, keys: list[str]) -> list[FetchResult]:
        """Batch one chunk, falling back to per-author calls if the batch fails."""
        match await self._fetch_author_batch(keys):
            case BatchFetched(records=records):
                fetched: list[FetchResult] = []
                for key, record in records.items():
                    self._cache.put(Category.AUTHOR, key, record)
                    fetched.append(Fetched(Category.AUTHOR, key, record))
                return fetched
            case BatchFetchFailure(keys=failed, reason=reason):
                logger.warning(
                    "Author batch of %d failed (%s), fetching individually",
                    len(failed), reason,
                )
                return await self._fetch_authors_individually(list(failed))

    async def _fetch_authors_individually(self, keys: list[str]) -> list[FetchResult]:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self._fetch_entity(Category.AUTHOR, key))
                for key in keys
            ]
        return [t.result() for t in tasks]

    async def _fetch_author_batch(self, keys: list[str]) -> BatchResult[AuthorDetail]:
        """One batched author search. Any exception becomes a BatchFetchFailure."""
        try:
            records = await self._source.fetch_authors_batch(
                author_filter_expression(keys), limit=len(keys)
            )
            by_key = {normalize_author_key(r.key): r for r in records}
        except Exception as e:  # noqa: BLE001 - any batch error falls back per author
            return BatchFetchFailure(tuple(keys), str(e) or type(e).__name__)
        wanted = set(keys)
        return BatchFetched({k: r for k, r in by_key.items() if k in wanted})


def _chunks(items: list[str], size: int) -> Iterator[list[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]
