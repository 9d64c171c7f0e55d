"""Task repository: owner-scoped queries, sharing rows and bulk detaches."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, or_, select, update

from tasktracker.models.task import Task, TaskPriority, TaskStatus, task_shares
from tasktracker.models.user import User
from tasktracker.repositories.base import BaseRepository, Page, Pagination


@dataclass(frozen=True, slots=True)
class TaskFilters:
    """Optional listing filters; ``None`` means "do not filter"."""

    statuses: Sequence[TaskStatus] | None = None
    priority: TaskPriority | None = None
    category_id: int | None = None
    search: str | None = None
    due_from: datetime | None = None
    due_to: datetime | None = None


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class TaskRepository(BaseRepository[Task]):
    """Persistence-only repository for :class:`Task`.

    Status and category are not in the update whitelist: the lifecycle and
    the category counter own those columns.
    """

    model = Task

    def _sortable_fields(self):
        return {
            "created_at": Task.created_at,
            "updated_at": Task.updated_at,
            "due_date": Task.due_date,
            "priority": Task.priority,
            "status": Task.status,
            "title": Task.title,
        }

    def _filterable_fields(self):
        return {
            "owner_id": Task.owner_id,
            "status": Task.status,
            "priority": Task.priority,
            "category_id": Task.category_id,
        }

    def _updatable_fields(self):
        return {"title", "description", "priority", "due_date", "tags", "estimated_hours"}

    # ---------------------------- Lookups ----------------------------

    def _owner_select(self, owner_id: int, filters: TaskFilters) -> Select[Any]:
        stmt = select(Task).where(Task.owner_id == owner_id)
        if filters.statuses:
            stmt = stmt.where(Task.status.in_(list(filters.statuses)))
        if filters.priority is not None:
            stmt = stmt.where(Task.priority == filters.priority)
        if filters.category_id is not None:
            stmt = stmt.where(Task.category_id == filters.category_id)
        if filters.search:
            pattern = _like_pattern(filters.search.strip())
            stmt = stmt.where(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )
        if filters.due_from is not None:
            stmt = stmt.where(Task.due_date >= filters.due_from)
        if filters.due_to is not None:
            stmt = stmt.where(Task.due_date <= filters.due_to)
        return stmt

    def list_for_owner(
        self, owner_id: int, filters: TaskFilters, pagination: Pagination
    ) -> Page[Task]:
        return self.paginate_stmt(self._owner_select(owner_id, filters), pagination)

    def status_counts(self, owner_id: int) -> dict[TaskStatus, int]:
        """Count the owner's tasks per status (unfiltered)."""
        stmt = (
            select(Task.status, func.count(Task.id))
            .where(Task.owner_id == owner_id)
            .group_by(Task.status)
        )
        counts = {status: 0 for status in TaskStatus}
        for status, count in self.session.execute(stmt).all():
            counts[TaskStatus(status)] = int(count)
        return counts

    def list_shared_with(self, user_id: int, pagination: Pagination) -> Page[Task]:
        stmt = select(Task).join(task_shares, task_shares.c.task_id == Task.id).where(
            task_shares.c.user_id == user_id
        )
        return self.paginate_stmt(stmt, pagination)

    # ---------------------------- Sharing ----------------------------

    def add_share(self, task: Task, user: User) -> None:
        """Grant read access; a concurrent duplicate raises ``IntegrityError`` on flush."""
        task.shared_with.append(user)
        self.flush()

    def remove_share(self, task: Task, user_id: int) -> bool:
        for user in list(task.shared_with):
            if user.id == user_id:
                task.shared_with.remove(user)
                self.flush()
                return True
        return False

    def is_shared_with(self, task_id: int, user_id: int) -> bool:
        stmt = select(task_shares.c.task_id).where(
            task_shares.c.task_id == task_id, task_shares.c.user_id == user_id
        )
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Bulk ops ----------------------------

    def detach_category(self, category_id: int) -> int:
        """Null ``category_id`` on every task referencing the category."""
        stmt = (
            update(Task)
            .where(Task.category_id == category_id)
            .values(category_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return int(self.session.execute(stmt).rowcount or 0)
