from __future__ import annotations

from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.repositories.base import Page

from .dto import PageMeta, TaskOut, TaskStatsOut


def task_to_out(row: Task) -> TaskOut:
    return TaskOut(
        id=row.id,
        title=row.title,
        description=row.description,
        status=TaskStatus(row.status).value,
        priority=TaskPriority(row.priority).value,
        due_date=row.due_date,
        category_id=row.category_id,
        tags=list(row.tags or []),
        estimated_hours=row.estimated_hours,
        completed_at=row.completed_at,
        owner_id=row.owner_id,
        shared_with=sorted(row.shared_user_ids),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def page_meta(page: Page[Task]) -> PageMeta:
    return PageMeta(page=page.page, limit=page.limit, total=page.total, pages=page.pages)


def stats_to_out(counts: dict[TaskStatus, int]) -> TaskStatsOut:
    return TaskStatsOut(
        todo=counts.get(TaskStatus.TODO, 0),
        in_progress=counts.get(TaskStatus.IN_PROGRESS, 0),
        completed=counts.get(TaskStatus.COMPLETED, 0),
        archived=counts.get(TaskStatus.ARCHIVED, 0),
    )
