# src/core/models.py — v1
"""Shared Pydantic domain models: work records, entity records, bundles.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class Category(StrEnum):
    """Entity categories a work can reference."""

    AUTHOR = "author"
    SUBJECT = "subject"
    PLACE = "place"
    PERSON = "person"
    TIME = "time"
    PUBLISHER = "publisher"
    EDITION = "edition"

    @property
    def path(self) -> str:
        """URL path segment used by the catalog API (e.g. ``authors``)."""
        return _CATEGORY_PATHS[self]


_CATEGORY_PATHS: dict[Category, str] = {
    Category.AUTHOR: "authors",
    Category.SUBJECT: "subjects",
    Category.PLACE: "places",
    Category.PERSON: "people",
    Category.TIME: "times",
    Category.PUBLISHER: "publishers",
    Category.EDITION: "editions",
}


# === ENTITY RECORDS ===


class DateTimeInfo(BaseModel):
    """Typed timestamp as returned by the catalog (``{"type", "value"}``)."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: str


class _EntityRecord(BaseModel):
    """Common shape: a lookup key plus an optional display name."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    name: str | None = None
    type: Any = None
    revision: int | None = None
    latest_revision: int | None = None
    created: DateTimeInfo | None = None
    last_modified: DateTimeInfo | None = None


class AuthorLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str


class AuthorDetail(_EntityRecord):
    """Author record, from ``authors/{id}.json`` or the batch author search."""

    birth_date: str | None = None
    death_date: str | None = None
    bio: Any = None
    alternate_names: list[str] = Field(default_factory=list)
    links: list[AuthorLink] = Field(default_factory=list)
    photos: list[int] = Field(default_factory=list)
    top_work: str | None = None
    work_count: int | None = None
    top_subjects: list[str] = Field(default_factory=list)


class SubjectWork(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    title: str | None = None
    cover_id: int | None = None


class SubjectDetail(_EntityRecord):
    description: Any = None
    works: list[SubjectWork] = Field(default_factory=list)
    work_count: int | None = None


class PlaceDetail(_EntityRecord):
    description: Any = None
    coordinates: list[float] = Field(default_factory=list)


class PersonDetail(_EntityRecord):
    birth_date: str | None = None
    death_date: str | None = None
    bio: Any = None


class TimeDetail(_EntityRecord):
    description: Any = None


class PublisherDetail(_EntityRecord):
    description: Any = None


class EditionDetail(_EntityRecord):
    """Edition record. Editions carry a title rather than a name."""

    title: str | None = None
    description: Any = None


EntityRecord = Union[
    AuthorDetail,
    SubjectDetail,
    PlaceDetail,
    PersonDetail,
    TimeDetail,
    PublisherDetail,
    EditionDetail,
]

RECORD_TYPES: dict[Category, type[_EntityRecord]] = {
    Category.AUTHOR: AuthorDetail,
    Category.SUBJECT: SubjectDetail,
    Category.PLACE: PlaceDetail,
    Category.PERSON: PersonDetail,
    Category.TIME: TimeDetail,
    Category.PUBLISHER: PublisherDetail,
    Category.EDITION: EditionDetail,
}


# === WORK RECORD ===


class AuthorReference(BaseModel):
    """Pointer from a work to an author, possibly with an embedded name."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str | None = None


class WorkRecord(BaseModel):
    """One catalog work with its reference lists, immutable during aggregation."""

    model_config = ConfigDict(frozen=True)

    key: str
    title: str = ""
    description: str | None = None
    first_publish_date: str | None = None
    covers: list[int] = Field(default_factory=list)
    isbn_13: list[str] = Field(default_factory=list)
    isbn_10: list[str] = Field(default_factory=list)
    authors: list[AuthorReference] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)
    subject_places: list[str] = Field(default_factory=list)
    subject_people: list[str] = Field(default_factory=list)
    subject_times: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)

    @property
    def has_references(self) -> bool:
        return any(
            (
                self.authors,
                self.subjects,
                self.subject_places,
                self.subject_people,
                self.subject_times,
                self.publishers,
            )
        )

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> WorkRecord:
        """Build a WorkRecord from a raw ``works/{id}.json`` payload.

        The API nests author references as ``{"author": {"key": ...}}``,
        sometimes as ``{"key": ...}`` directly. Publishers come as
        ``{"name": ...}`` objects or plain strings. Descriptions come as a
        string or a ``{"type", "value"}`` object.
        """
        authors: list[AuthorReference] = []
        for entry in payload.get("authors") or []:
            if not isinstance(entry, dict):
                continue
            ref = entry.get("author") if isinstance(entry.get("author"), dict) else entry
            key = ref.get("key")
            if isinstance(key, str) and key.strip():
                name = ref.get("name")
                authors.append(
                    AuthorReference(key=key, name=name if isinstance(name, str) else None)
                )

        publishers: list[str] = []
        for entry in payload.get("publishers") or []:
            name = entry.get("name") if isinstance(entry, dict) else entry
            if isinstance(name, str) and name.strip():
                publishers.append(name)

        description = payload.get("description")
        if isinstance(description, dict):
            description = description.get("value")
        if not isinstance(description, str):
            description = None

        return cls(
            key=payload.get("key") or "",
            title=payload.get("title") or "",
            description=description,
            first_publish_date=payload.get("first_publish_date"),
            covers=[c for c in payload.get("covers") or [] if isinstance(c, int)],
            isbn_13=_strings(payload.get("isbn_13")),
            isbn_10=_strings(payload.get("isbn_10")),
            authors=authors,
            subjects=_strings(payload.get("subjects")),
            subject_places=_strings(payload.get("subject_places")),
            subject_people=_strings(payload.get("subject_people")),
            subject_times=_strings(payload.get("subject_times")),
            publishers=publishers,
        )


def _strings(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str) and v.strip()]


# === REFERENCE BUNDLE ===


class ReferenceBundle(BaseModel):
    """Resolved entities of one aggregation call, keyed by category then key.

    ``editions`` is reserved and currently always empty.
    """

    authors: dict[str, AuthorDetail] = Field(default_factory=dict)
    subjects: dict[str, SubjectDetail] = Field(default_factory=dict)
    places: dict[str, PlaceDetail] = Field(default_factory=dict)
    people: dict[str, PersonDetail] = Field(default_factory=dict)
    times: dict[str, TimeDetail] = Field(default_factory=dict)
    publishers: dict[str, PublisherDetail] = Field(default_factory=dict)
    editions: dict[str, EditionDetail] = Field(default_factory=dict)

    def for_category(self, category: Category) -> dict[str, Any]:
        """Return the mapping that holds records of ``category``."""
        return getattr(self, _BUNDLE_FIELDS[category])

    @property
    def total_resolved(self) -> int:
        return sum(len(getattr(self, f)) for f in _BUNDLE_FIELDS.values())

    @property
    def is_empty(self) -> bool:
        return self.total_resolved == 0


_BUNDLE_FIELDS: dict[Category, str] = {
    Category.AUTHOR: "authors",
    Category.SUBJECT: "subjects",
    Category.PLACE: "places",
    Category.PERSON: "people",
    Category.TIME: "times",
    Category.PUBLISHER: "publishers",
    Category.EDITION: "editions",
}


# === SEARCH ===


class BookDoc(BaseModel):
    """One hit of ``search.json``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    title: str = ""
    author_name: list[str] = Field(default_factory=list)
    first_publish_year: int | None = None
    publisher: list[str] = Field(default_factory=list)
    isbn: list[str] = Field(default_factory=list)
    cover_i: int | None = None
    subject: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    numFound: int = 0  # noqa: N815
    start: int = 0
    docs: list[BookDoc] = Field(default_factory=list)
