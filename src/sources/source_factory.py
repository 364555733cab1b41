# src/sources/source_factory.py — v1
"""Factory for catalog source instantiation."""

from __future__ import annotations

from bookfinder.config.settings import Settings
from bookfinder.sources.base_source import BaseCatalogSource


def create_catalog_source(settings: Settings | None = None) -> BaseCatalogSource:
    """Instantiate the Open Library source configured by ``settings``.

    Args:
        settings: Application settings. Loaded from .env if None.

    Returns:
        A BaseCatalogSource; callers close it with ``aclose()``.
    """
    from bookfinder.sources.openlibrary_source import OpenLibrarySource

    return OpenLibrarySource.from_settings(settings or Settings())
