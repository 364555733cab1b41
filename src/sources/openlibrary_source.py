# src/sources/openlibrary_source.py — v1
"""Open Library catalog source over httpx.AsyncClient.

Endpoints used:
    works/{id}.json, search.json, search/authors.json,
    authors/{id}.json, subjects/{id}.json, places/{id}.json,
    people/{id}.json, times/{id}.json, publishers/{name}.json,
    editions/{id}.json
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from bookfinder.config.settings import Settings
from bookfinder.core.errors import EntityNotFound, TransportError
from bookfinder.core.keys import (
    normalize_author_key,
    normalize_publisher_key,
    normalize_reference_key,
    subject_slug,
)
from bookfinder.core.models import (
    RECORD_TYPES,
    AuthorDetail,
    Category,
    EntityRecord,
    SearchResponse,
    WorkRecord,
)
from bookfinder.sources.base_source import BaseCatalogSource

logger = logging.getLogger(__name__)

_SUBJECT_LIKE = {Category.SUBJECT, Category.PLACE, Category.PERSON, Category.TIME}


class OpenLibrarySource(BaseCatalogSource):
    """Open Library REST client.

    Args:
        base_url: API root, e.g. ``https://openlibrary.org``.
        user_agent: Sent on every request; Open Library asks clients to
            identify themselves.
        timeout: Per-call httpx timeout.
        search_fields: ``fields`` parameter for ``search.json``.
        client: Pre-built AsyncClient (tests inject one with a MockTransport).
    """

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        user_agent: str = "BookFinder/1.0.0",
        timeout: httpx.Timeout | None = None,
        search_fields: list[str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=timeout or httpx.Timeout(20.0, connect=15.0, write=15.0),
            follow_redirects=True,
        )
        self._search_fields = search_fields or []

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenLibrarySource:
        timeout = httpx.Timeout(
            settings.http_read_timeout_s,
            connect=settings.http_connect_timeout_s,
            read=settings.http_read_timeout_s,
            write=settings.http_write_timeout_s,
        )
        return cls(
            base_url=settings.openlibrary_base_url,
            user_agent=settings.openlibrary_user_agent,
            timeout=timeout,
            search_fields=settings.search_fields_list,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Entities ---

    async def fetch_entity(self, category: Category, key: str) -> EntityRecord:
        path = entity_path(category, key)
        payload = await self._get_json(path, not_found=(category.value, key))
        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected payload for {path}: {type(payload).__name__}")
        payload.setdefault("key", path[: -len(".json")])
        try:
            return RECORD_TYPES[category].model_validate(payload)
        except ValidationError as e:
            raise TransportError(f"Invalid {category} payload for {key!r}: {e}") from e

    async def fetch_authors_batch(
        self, filter_expression: str, limit: int
    ) -> list[AuthorDetail]:
        payload = await self._get_json(
            "/search/authors.json", params={"q": filter_expression, "limit": limit}
        )
        docs = payload.get("docs") if isinstance(payload, dict) else None
        if not isinstance(docs, list):
            raise TransportError("Author search response has no 'docs' list")
        try:
            return [
                AuthorDetail.model_validate(
                    {**doc, "key": f"/authors/{normalize_author_key(doc['key'])}"}
                )
                for doc in docs
            ]
        except (KeyError, TypeError, ValidationError) as e:
            raise TransportError(f"Malformed author search doc: {e}") from e

    # --- Works and search ---

    async def fetch_work(self, work_id: str) -> WorkRecord:
        bare = normalize_reference_key(work_id).rsplit("/", 1)[-1]
        payload = await self._get_json(
            f"/works/{quote(bare, safe='')}.json", not_found=("work", bare)
        )
        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected payload for work {bare!r}")
        try:
            return WorkRecord.from_api(payload)
        except ValidationError as e:
            raise TransportError(f"Invalid work payload for {bare!r}: {e}") from e

    async def search_books(
        self,
        query: str,
        page: int = 1,
        limit: int = 20,
        language: str | None = None,
        sort: str | None = None,
    ) -> SearchResponse:
        params: dict[str, Any] = {"q": query, "page": max(1, page), "limit": max(1, limit)}
        if self._search_fields:
            params["fields"] = ",".join(self._search_fields)
        if language:
            params["language"] = language
        if sort:
            params["sort"] = sort
        payload = await self._get_json("/search.json", params=params)
        try:
            return SearchResponse.model_validate(payload)
        except ValidationError as e:
            raise TransportError(f"Invalid search payload: {e}") from e

    # --- Transport ---

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        not_found: tuple[str, str] | None = None,
    ) -> Any:
        t0 = time.monotonic()
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {path} failed: {e}") from e
        latency = int((time.monotonic() - t0) * 1000)
        logger.debug("GET %s -> %d (%d ms)", path, resp.status_code, latency)

        if resp.status_code == 404 and not_found is not None:
            raise EntityNotFound(*not_found)
        if resp.status_code >= 400:
            raise TransportError(
                f"GET {path} returned HTTP {resp.status_code}", status_code=resp.status_code
            )
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"GET {path} returned invalid JSON") from e


def entity_path(category: Category, key: str) -> str:
    """API path for one entity, e.g. ``/subjects/science_fiction.json``."""
    if category is Category.AUTHOR:
        ident = normalize_author_key(key)
    elif category is Category.PUBLISHER:
        ident = normalize_publisher_key(key)
    elif category in _SUBJECT_LIKE:
        ident = subject_slug(key)
    else:
        ident = normalize_reference_key(key).rsplit("/", 1)[-1]
    return f"/{category.path}/{quote(ident, safe='')}.json"
