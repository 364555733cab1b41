# tests/unit/core/test_unit_errors.py — v1
"""Tests for core/errors.py."""

from __future__ import annotations

from bookfinder.core.errors import (
    AggregationFailure,
    CatalogSourceError,
    EntityNotFound,
    TransportError,
)


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(EntityNotFound, CatalogSourceError)
        assert issubclass(TransportError, CatalogSourceError)
        assert not issubclass(AggregationFailure, CatalogSourceError)

    def test_not_found_message(self):
        err = EntityNotFound("subject", "subjects/x")
        assert err.category == "subject"
        assert "subjects/x" in str(err)

    def test_transport_status(self):
        assert TransportError("bad", status_code=503).status_code == 503

    def test_aggregation_cause(self):
        cause = RuntimeError("boom")
        err = AggregationFailure("/works/OL1W", cause)
        assert err.cause is cause
        assert "/works/OL1W" in str(err)
