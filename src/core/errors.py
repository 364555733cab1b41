# src/core/errors.py — v1
"""Exception hierarchy for catalog sources and reference aggregation.

Per-entity and batch failures are never raised out of the aggregator; they
travel as result values (see core.result). Only AggregationFailure reaches
callers of resolve_references().
"""

from __future__ import annotations


class CatalogSourceError(Exception):
    """Base class for errors raised by a catalog source."""


class EntityNotFound(CatalogSourceError):
    """The remote catalog has no record for the requested key."""

    def __init__(self, category: str, key: str):
        self.category = category
        self.key = key
        super().__init__(f"{category} not found: {key!r}")


class TransportError(CatalogSourceError):
    """Network failure, non-success status or undecodable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AggregationFailure(Exception):
    """The concurrent resolution of a work's references failed as a whole."""

    def __init__(self, work_key: str, cause: BaseException):
        self.work_key = work_key
        self.cause = cause
        super().__init__(f"Reference resolution failed for {work_key!r}: {cause}")
