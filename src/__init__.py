"""bookfinder: Open Library work reference aggregation with TTL caching."""

from bookfinder.version import __version__  # noqa: F401
