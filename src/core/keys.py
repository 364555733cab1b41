# src/core/keys.py — v1
"""Reference key normalization.

A raw reference (``"/subjects/fiction.json"``, ``"/authors/OL7A"``, a bare
subject string, a publisher name) is reduced to one canonical key that is
used both as the cache key and as the bundle key. Two raw strings that
normalize to the same key denote the same entity.
"""

from __future__ import annotations

from collections.abc import Iterable

_FORMAT_SUFFIX = ".json"
_AUTHOR_PREFIX = "authors/"
_SUBJECT_PREFIXES = ("subjects/", "places/", "people/", "times/")

# Open Library identifiers (OL123A, OL45W, ...) carry this prefix.
INSTITUTIONAL_PREFIX = "OL"


def normalize_reference_key(raw: str) -> str:
    """Strip leading path separators and a trailing ``.json`` suffix."""
    key = raw.strip().lstrip("/")
    if key.endswith(_FORMAT_SUFFIX):
        key = key[: -len(_FORMAT_SUFFIX)]
    return key


def normalize_author_key(raw: str) -> str:
    """Normalize an author key down to its bare identifier (``OL7A``)."""
    key = normalize_reference_key(raw)
    if key.startswith(_AUTHOR_PREFIX):
        key = key[len(_AUTHOR_PREFIX):]
    return key


def normalize_publisher_key(name: str) -> str:
    """Publishers have no identifier upstream; the name is the key.

    Two distinct publishers sharing a display name therefore collide.
    """
    return normalize_reference_key(name)


def author_filter_expression(keys: Iterable[str]) -> str:
    """Build the batch author search filter ``key:(/authors/K1 OR ...)``."""
    qualified = [f"/{_AUTHOR_PREFIX}{normalize_author_key(k)}" for k in keys]
    return f"key:({' OR '.join(qualified)})"


def author_display_label(key: str) -> str:
    """Synthesize a label for an author that could not be resolved."""
    bare = normalize_author_key(key)
    if bare.startswith(INSTITUTIONAL_PREFIX):
        return f"Author {bare}"
    return bare


def subject_slug(key: str) -> str:
    """URL slug for a subject-like key.

    A leading ``subjects/``, ``places/``, ``people/`` or ``times/`` is dropped;
    the rest is lowercased with ``/`` and whitespace runs turned into single
    underscores, so ``"Fiction / Fantasy / General"`` becomes
    ``"fiction_fantasy_general"``.
    """
    ident = normalize_reference_key(key)
    for prefix in _SUBJECT_PREFIXES:
        if ident.startswith(prefix):
            ident = ident[len(prefix):]
            break
    return "_".join(ident.replace("/", " ").lower().split())


def normalize_subject_key(raw: str) -> str:
    """Normalize a subject, place, person or time reference.

    Case and inner whitespace are folded, since ``"Fiction"`` and
    ``"fiction"`` resolve to the same remote entity.
    """
    return " ".join(normalize_reference_key(raw).split()).lower()


def dedupe_keys(raw_values: Iterable[str], normalize=normalize_reference_key) -> dict[str, str]:
    """Map normalized key -> first raw value seen, skipping blanks."""
    seen: dict[str, str] = {}
    for raw in raw_values:
        key = normalize(raw)
        if key and key not in seen:
            seen[key] = raw
    return seen
