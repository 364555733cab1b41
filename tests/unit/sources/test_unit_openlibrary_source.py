# tests/unit/sources/test_unit_openlibrary_source.py — v1
"""Tests for sources/openlibrary_source.py — httpx client over a MockTransport."""

from __future__ import annotations

import httpx
import pytest

from bookfinder.aggregation.aggregator import ReferenceAggregator
from bookfinder.aggregation.display import reference_display_name
from bookfinder.cache.memory_store import InMemoryReferenceCache
from bookfinder.config.settings import Settings
from bookfinder.core.errors import EntityNotFound, TransportError
from bookfinder.core.models import AuthorDetail, Category, SubjectDetail, WorkRecord
from bookfinder.sources.openlibrary_source import OpenLibrarySource, entity_path
from bookfinder.sources.source_factory import create_catalog_source


def _source(handler) -> OpenLibrarySource:
    client = httpx.AsyncClient(
        base_url="https://openlibrary.test",
        transport=httpx.MockTransport(handler),
    )
    return OpenLibrarySource(client=client, search_fields=["key", "title"])


class TestEntityPath:
    def test_author(self):
        assert entity_path(Category.AUTHOR, "/authors/OL7A") == "/authors/OL7A.json"

    def test_subject_prefixed(self):
        assert entity_path(Category.SUBJECT, "subjects/fiction") == "/subjects/fiction.json"

    def test_subject_plain(self):
        assert entity_path(Category.SUBJECT, "Science Fiction") == "/subjects/science_fiction.json"

    def test_place(self):
        assert entity_path(Category.PLACE, "places/england") == "/places/england.json"

    def test_subject_with_slashes(self):
        path = entity_path(Category.SUBJECT, "Fiction / Fantasy / General")
        assert path == "/subjects/fiction_fantasy_general.json"

    def test_publisher_name_quoted(self):
        assert entity_path(Category.PUBLISHER, "Penguin Books") == "/publishers/Penguin%20Books.json"


class TestFetchEntity:
    @pytest.mark.asyncio
    async def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/subjects/fiction.json"
            return httpx.Response(200, json={"key": "/subjects/fiction", "name": "Fiction"})

        async with _source(handler) as source:
            record = await source.fetch_entity(Category.SUBJECT, "subjects/fiction")
        assert isinstance(record, SubjectDetail)
        assert record.name == "Fiction"

    @pytest.mark.asyncio
    async def test_missing_key_filled_from_path(self):
        def handler(request):
            return httpx.Response(200, json={"name": "London"})

        async with _source(handler) as source:
            record = await source.fetch_entity(Category.PLACE, "places/london")
        assert record.key == "/places/london"

    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        async with _source(lambda r: httpx.Response(404)) as source:
            with pytest.raises(EntityNotFound):
                await source.fetch_entity(Category.TIME, "times/future")

    @pytest.mark.asyncio
    async def test_500_is_transport_error(self):
        async with _source(lambda r: httpx.Response(503)) as source:
            with pytest.raises(TransportError) as exc_info:
                await source.fetch_entity(Category.PLACE, "places/x")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _source(handler) as source:
            with pytest.raises(TransportError, match="failed"):
                await source.fetch_entity(Category.PLACE, "places/x")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async with _source(lambda r: httpx.Response(200, text="<html>")) as source:
            with pytest.raises(TransportError, match="invalid JSON"):
                await source.fetch_entity(Category.PLACE, "places/x")

    @pytest.mark.asyncio
    async def test_invalid_shape(self):
        async with _source(lambda r: httpx.Response(200, json={"name": 5})) as source:
            with pytest.raises(TransportError):
                await source.fetch_entity(Category.PERSON, "people/x")


class TestFetchAuthorsBatch:
    @pytest.mark.asyncio
    async def test_maps_search_docs(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "numFound": 2,
                "docs": [
                    {"key": "OL1A", "name": "Ann", "type": "author", "work_count": 4},
                    {"key": "OL2A", "name": "Bob", "type": "author"},
                ],
            })

        async with _source(handler) as source:
            records = await source.fetch_authors_batch(
                "key:(/authors/OL1A OR /authors/OL2A)", limit=2
            )
        assert seen == {"q": "key:(/authors/OL1A OR /authors/OL2A)", "limit": "2"}
        assert all(isinstance(r, AuthorDetail) for r in records)
        assert [r.key for r in records] == ["/authors/OL1A", "/authors/OL2A"]
        assert records[0].work_count == 4

    @pytest.mark.asyncio
    async def test_missing_docs_raises(self):
        async with _source(lambda r: httpx.Response(200, json={"numFound": 0})) as source:
            with pytest.raises(TransportError, match="docs"):
                await source.fetch_authors_batch("key:(/authors/OL1A)", limit=1)

    @pytest.mark.asyncio
    async def test_doc_without_key_raises(self):
        payload = {"docs": [{"name": "No key"}]}
        async with _source(lambda r: httpx.Response(200, json=payload)) as source:
            with pytest.raises(TransportError, match="Malformed"):
                await source.fetch_authors_batch("key:(/authors/OL1A)", limit=1)


class TestFetchWork:
    @pytest.mark.asyncio
    async def test_success(self):
        def handler(request):
            assert request.url.path == "/works/OL45804W.json"
            return httpx.Response(200, json={
                "key": "/works/OL45804W",
                "title": "Fantastic Mr Fox",
                "authors": [{"author": {"key": "/authors/OL34184A"}}],
                "subjects": ["Foxes"],
            })

        async with _source(handler) as source:
            work = await source.fetch_work("/works/OL45804W")
        assert work.title == "Fantastic Mr Fox"
        assert work.authors[0].key == "/authors/OL34184A"

    @pytest.mark.asyncio
    async def test_not_found(self):
        async with _source(lambda r: httpx.Response(404)) as source:
            with pytest.raises(EntityNotFound):
                await source.fetch_work("OL0W")


class TestSearchBooks:
    @pytest.mark.asyncio
    async def test_params_and_parse(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "numFound": 1,
                "start": 0,
                "docs": [{"key": "/works/OL1W", "title": "Dune", "author_name": ["Frank Herbert"]}],
            })

        async with _source(handler) as source:
            response = await source.search_books("dune", page=2, limit=5, language="eng", sort="new")
        assert seen == {
            "q": "dune", "page": "2", "limit": "5",
            "fields": "key,title", "language": "eng", "sort": "new",
        }
        assert response.numFound == 1
        assert response.docs[0].author_name == ["Frank Herbert"]


class TestSubjectResolution:
    @pytest.mark.asyncio
    async def test_slashed_subject_resolves_to_its_own_entity(self):
        requested = []

        def handler(request):
            requested.append(request.url.path)
            if request.url.path == "/subjects/fiction_fantasy_general.json":
                return httpx.Response(200, json={
                    "key": "/subjects/fiction_fantasy_general",
                    "name": "Fiction / Fantasy / General",
                })
            return httpx.Response(200, json={"key": "/subjects/general", "name": "general"})

        raw = "Fiction / Fantasy / General"
        work = WorkRecord(key="/works/OL1W", title="T", subjects=[raw])
        async with _source(handler) as source:
            bundle = await ReferenceAggregator(
                source, InMemoryReferenceCache()
            ).resolve_references(work)

        assert requested == ["/subjects/fiction_fantasy_general.json"]
        assert reference_display_name(Category.SUBJECT, raw, bundle) == raw


class TestFactory:
    @pytest.mark.asyncio
    async def test_from_settings(self):
        settings = Settings(_env_file=None, openlibrary_user_agent="Test/1.0")
        source = create_catalog_source(settings)
        try:
            assert isinstance(source, OpenLibrarySource)
            assert source._client.headers["User-Agent"] == "Test/1.0"
            assert source._client.timeout.connect == 15.0
        finally:
            await source.aclose()
