# src/aggregation/display.py — v1
"""Display-name resolution over a ReferenceBundle.

Fallback order:
  author            resolved name > name embedded in the work > synthesized label
  subject-like      resolved name > raw reference string
  publisher         resolved name > original publisher name
"""

from __future__ import annotations

import re

from bookfinder.api.models import WorkView
from bookfinder.core.keys import (
    author_display_label,
    normalize_author_key,
    normalize_publisher_key,
    normalize_subject_key,
)
from bookfinder.core.models import AuthorReference, Category, ReferenceBundle, WorkRecord

COVER_URL_TEMPLATE = "https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"

_SUBJECT_LIKE = (Category.SUBJECT, Category.PLACE, Category.PERSON, Category.TIME)


def author_display_name(ref: AuthorReference, bundle: ReferenceBundle) -> str:
    key = normalize_author_key(ref.key)
    record = bundle.authors.get(key)
    if record is not None and record.name:
        return record.name
    if ref.name:
        return ref.name
    return author_display_label(key)


def reference_display_name(category: Category, raw: str, bundle: ReferenceBundle) -> str:
    """Display name for a subject, place, person or time reference."""
    if category not in _SUBJECT_LIKE:
        raise ValueError(f"Not a subject-like category: {category}")
    record = bundle.for_category(category).get(normalize_subject_key(raw))
    if record is not None and record.name:
        return record.name
    return raw


def publisher_display_name(name: str, bundle: ReferenceBundle) -> str:
    record = bundle.publishers.get(normalize_publisher_key(name))
    if record is not None and record.name:
        return record.name
    return name


def first_published_year(date: str | None) -> int | None:
    """Pull a four-digit year out of free-form dates like 'March 1954' or '1954-07-29'."""
    if not date:
        return None
    match = re.search(r"\b(\d{4})\b", date)
    return int(match.group(1)) if match else None


def build_work_view(work: WorkRecord, bundle: ReferenceBundle) -> WorkView:
    """Assemble display fields for ``work`` using resolved references where available."""
    isbns = work.isbn_13 or work.isbn_10
    return WorkView(
        key=work.key,
        title=work.title,
        author_names=_unique(author_display_name(a, bundle) for a in work.authors),
        first_published_year=first_published_year(work.first_publish_date),
        publisher=publisher_display_name(work.publishers[0], bundle) if work.publishers else None,
        isbn=isbns[0] if isbns else None,
        cover_url=COVER_URL_TEMPLATE.format(cover_id=work.covers[0]) if work.covers else None,
        description=work.description,
        subjects=_unique(reference_display_name(Category.SUBJECT, s, bundle) for s in work.subjects),
        places=_unique(reference_display_name(Category.PLACE, s, bundle) for s in work.subject_places),
        people=_unique(reference_display_name(Category.PERSON, s, bundle) for s in work.subject_people),
        times=_unique(reference_display_name(Category.TIME, s, bundle) for s in work.subject_times),
    )


def _unique(values) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)
