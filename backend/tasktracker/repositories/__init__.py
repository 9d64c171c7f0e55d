"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from tasktracker.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from tasktracker.repositories.category import CategoryRepository
from tasktracker.repositories.session import RefreshSessionRepository
from tasktracker.repositories.task import TaskFilters, TaskRepository
from tasktracker.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "paginate_select",
    # Domain
    "CategoryRepository",
    "RefreshSessionRepository",
    "TaskFilters",
    "TaskRepository",
    "UserRepository",
]
