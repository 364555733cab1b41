# src/logging/context.py — v1
"""Contextual logging support: attach work_key, resolution_id, category to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per resolve_references() call.
# asyncio tasks copy the context at creation, so a category set inside a child
# task never leaks into its siblings.
_work_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "work_key", default=None
)
_resolution_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resolution_id", default=None
)
_category: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "category", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    work_key: str | None = None
    resolution_id: str | None = None
    category: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        work_key=_work_key.get(),
        resolution_id=_resolution_id.get(),
        category=_category.get(),
    )


def set_work_context(work_key: str, resolution_id: str) -> None:
    """Set work-level context (called once per aggregation)."""
    _work_key.set(work_key)
    _resolution_id.set(resolution_id)


def set_category_context(category: str | None) -> None:
    """Set category-level context (called per resolution task)."""
    _category.set(category)


def clear_context() -> None:
    """Reset all context variables."""
    _work_key.set(None)
    _resolution_id.set(None)
    _category.set(None)
