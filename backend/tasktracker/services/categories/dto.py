from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tasktracker.models.category import DEFAULT_CATEGORY_COLOR


@dataclass(frozen=True, slots=True)
class CategoryCreateIn:
    name: str
    color: str = DEFAULT_CATEGORY_COLOR


@dataclass(frozen=True, slots=True)
class CategoryUpdateIn:
    """Partial update; ``None`` leaves the field unchanged."""

    name: str | None = None
    color: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryOut:
    id: int
    name: str
    color: str
    task_count: int
    owner_id: int
    created_at: datetime
    updated_at: datetime
