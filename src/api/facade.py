# src/api/facade.py — v1
"""Public API facade.

Usage:
    from bookfinder.api.facade import create_aggregator, describe_work

    aggregator = create_aggregator()
    view = await describe_work("OL45804W", aggregator=aggregator)

Reuse one aggregator across calls to share its reference cache.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bookfinder.aggregation.aggregator import ReferenceAggregator
from bookfinder.aggregation.display import COVER_URL_TEMPLATE, build_work_view
from bookfinder.api.models import BookSummary, WorkView
from bookfinder.cache.cache_factory import create_reference_cache
from bookfinder.config.settings import Settings
from bookfinder.sources.source_factory import create_catalog_source

if TYPE_CHECKING:
    from bookfinder.cache.base_reference_cache import BaseReferenceCache
    from bookfinder.core.models import BookDoc
    from bookfinder.sources.base_source import BaseCatalogSource

logger = logging.getLogger(__name__)


def create_aggregator(
    settings: Settings | None = None,
    source: BaseCatalogSource | None = None,
    cache: BaseReferenceCache | None = None,
) -> ReferenceAggregator:
    """Wire an aggregator from settings, creating the source and cache if absent."""
    settings = settings or Settings()
    return ReferenceAggregator.from_settings(
        settings,
        source=source if source is not None else create_catalog_source(settings),
        cache=cache if cache is not None else create_reference_cache(settings),
    )


async def describe_work(
    work_id: str,
    aggregator: ReferenceAggregator | None = None,
    settings: Settings | None = None,
) -> WorkView:
    """Fetch a work, resolve its references and build its display view.

    Args:
        work_id: ``OL45804W``, ``works/OL45804W`` or ``/works/OL45804W.json``.
        aggregator: Aggregator to use. A throwaway one is created if None and
            its source is closed afterwards.
        settings: Used only when ``aggregator`` is None.

    Raises:
        EntityNotFound: The work does not exist.
        TransportError: The work itself could not be fetched.
        AggregationFailure: Reference resolution failed as a whole.
    """
    owned = aggregator is None
    aggregator = aggregator or create_aggregator(settings)
    source = aggregator.source
    try:
        work = await source.fetch_work(work_id)
        logger.info("Fetched work %s (%s)", work.key, work.title)
        bundle = await aggregator.resolve_references(work)
        return build_work_view(work, bundle)
    finally:
        if owned:
            await source.aclose()


async def search_books(
    query: str,
    page: int = 1,
    limit: int | None = None,
    language: str | None = None,
    sort: str | None = None,
    source: BaseCatalogSource | None = None,
    settings: Settings | None = None,
) -> list[BookSummary]:
    """Search the catalog and flatten hits into BookSummary objects."""
    settings = settings or Settings()
    owned = source is None
    source = source or create_catalog_source(settings)
    try:
        response = await source.search_books(
            query,
            page=page,
            limit=limit or settings.search_page_size,
            language=language,
            sort=sort,
        )
    finally:
        if owned:
            await source.aclose()
    logger.info("Search %r page %d: %d of %d hits", query, page, len(response.docs), response.numFound)
    return [_summarize(doc) for doc in response.docs]


def _summarize(doc: BookDoc) -> BookSummary:
    return BookSummary(
        key=doc.key,
        title=doc.title,
        author_names=doc.author_name,
        first_published_year=doc.first_publish_year,
        publisher=doc.publisher[0] if doc.publisher else None,
        isbn=doc.isbn[0] if doc.isbn else None,
        cover_url=COVER_URL_TEMPLATE.format(cover_id=doc.cover_i) if doc.cover_i else None,
        subjects=doc.subject,
    )
