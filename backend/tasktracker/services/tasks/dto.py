from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tasktracker.models.task import TaskPriority, TaskStatus

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskCreateIn:
    """Fields accepted when creating a task. Status always starts at ``todo``."""

    title: str
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    category_id: int | None = None
    tags: Sequence[str] = ()
    estimated_hours: float | None = None


@dataclass(frozen=True, slots=True)
class TaskUpdateIn:
    """
    Partial update of a task.

    Only keys listed in ``fields_set`` are applied, so a nullable field can
    be cleared by sending ``None`` explicitly. ``status`` goes through the
    lifecycle and ``category_id`` through the category counter.
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    category_id: int | None = None
    tags: Sequence[str] | None = None
    estimated_hours: float | None = None
    fields_set: frozenset[str] = frozenset()

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> TaskUpdateIn:
        return cls(**data, fields_set=frozenset(data))

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.fields_set}


@dataclass(frozen=True, slots=True)
class TaskListIn:
    """Listing query for the caller's own tasks."""

    statuses: Sequence[TaskStatus] | None = None
    priority: TaskPriority | None = None
    category_id: int | None = None
    search: str | None = None
    due_from: datetime | None = None
    due_to: datetime | None = None
    page: int = 1
    limit: int = 10
    sort: Sequence[str] = ("-created_at",)
    with_stats: bool = True


# ---------------------------- Output DTOs --------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskOut:
    id: int
    title: str
    description: str | None
    status: str
    priority: str
    due_date: datetime | None
    category_id: int | None
    tags: list[str]
    estimated_hours: float | None
    completed_at: datetime | None
    owner_id: int
    shared_with: list[int]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class PageMeta:
    page: int
    limit: int
    total: int
    pages: int


@dataclass(frozen=True, slots=True)
class TaskStatsOut:
    """Per-status totals of the owner's tasks, independent of list filters."""

    todo: int = 0
    in_progress: int = 0
    completed: int = 0
    archived: int = 0


@dataclass(frozen=True, slots=True)
class TaskListOut:
    items: list[TaskOut]
    meta: PageMeta
    stats: TaskStatsOut | None = None


@dataclass(frozen=True, slots=True)
class ShareOut:
    task_id: int
    shared_with: list[int] = field(default_factory=list)
