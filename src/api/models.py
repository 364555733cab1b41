# src/api/models.py — v1
"""API-level models: WorkView, BookSummary."""

from __future__ import annotations

from pydantic import BaseModel, Field


class WorkView(BaseModel):
    """Display-ready description of one work (return value of facade.describe_work)."""

    key: str
    title: str
    author_names: list[str] = Field(default_factory=list)
    first_published_year: int | None = None
    publisher: str | None = None
    isbn: str | None = None
    cover_url: str | None = None
    description: str | None = None
    subjects: list[str] = Field(default_factory=list)
    places: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    times: list[str] = Field(default_factory=list)

    @property
    def author_display(self) -> str:
        return ", ".join(self.author_names) if self.author_names else "Unknown Author"

    @property
    def year_display(self) -> str:
        return str(self.first_published_year) if self.first_published_year else "Unknown Year"


class BookSummary(BaseModel):
    """One search hit, flattened for listing."""

    key: str
    title: str
    author_names: list[str] = Field(default_factory=list)
    first_published_year: int | None = None
    publisher: str | None = None
    isbn: str | None = None
    cover_url: str | None = None
    subjects: list[str] = Field(default_factory=list)
