# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Open Library transport ===
    openlibrary_base_url: str = "https://openlibrary.org"
    openlibrary_user_agent: str = (
        "BookFinder/1.0.0 (https://github.com/rikoarik/bookfinder; rikoarik04@gmail.com)"
    )
    http_connect_timeout_s: float = 15.0
    http_read_timeout_s: float = 20.0
    http_write_timeout_s: float = 15.0

    # === Reference cache ===
    reference_cache_ttl_seconds: float = 300.0
    # 0 keeps every entry for the process lifetime
    reference_cache_max_entries: int = 0

    # === Aggregation ===
    author_batch_enabled: bool = True
    author_batch_max_limit: int = 100

    # === Search ===
    search_page_size: int = 20
    search_fields: str = (
        "key,title,author_name,first_publish_year,publisher,isbn,cover_i,subject"
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("openlibrary_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:  # noqa: N805
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in ("http_connect_timeout_s", "http_read_timeout_s", "http_write_timeout_s"):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} must be > 0")

        if self.reference_cache_ttl_seconds <= 0:
            errors.append("REFERENCE_CACHE_TTL_SECONDS must be > 0")

        if self.reference_cache_max_entries < 0:
            errors.append("REFERENCE_CACHE_MAX_ENTRIES must be >= 0")

        if self.author_batch_max_limit < 1:
            errors.append("AUTHOR_BATCH_MAX_LIMIT must be >= 1")

        if self.search_page_size < 1:
            errors.append("SEARCH_PAGE_SIZE must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def search_fields_list(self) -> list[str]:
        """Parse comma-separated search fields."""
        return [f.strip() for f in self.search_fields.split(",") if f.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
