from __future__ import annotations

import logging

from tasktracker.repositories.task import TaskFilters, TaskRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.errors import AuthorizationError, NotFoundError
from tasktracker.services._shared.policies.common import can_read

from ._converters import page_meta, stats_to_out, task_to_out
from .dto import TaskListIn, TaskListOut, TaskOut

logger = logging.getLogger(__name__)


class TaskQueryService(BaseService):
    """Read-only task projections."""

    def get(self, task_id: int, principal_id: int) -> TaskOut:
        """
        Return a task readable by ``principal_id``.

        :raises NotFoundError: No such task.
        :raises AuthorizationError: The task exists but is neither owned by
            nor shared with the caller.
        """
        with self.ro_uow() as uow:
            task = uow.tasks.get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            if not can_read(task, principal_id):
                logger.warning(
                    "Task read denied", extra={"task_id": task_id, "user_id": principal_id}
                )
                raise AuthorizationError("You do not have access to this task")
            return task_to_out(task)

    def list(self, owner_id: int, dto: TaskListIn) -> TaskListOut:
        """List the caller's own tasks with filters, paging and per-status stats."""
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        filters = TaskFilters(
            statuses=dto.statuses,
            priority=dto.priority,
            category_id=dto.category_id,
            search=dto.search,
            due_from=dto.due_from,
            due_to=dto.due_to,
        )
        with self.ro_uow() as uow:
            repo: TaskRepository = uow.tasks
            page = repo.list_for_owner(owner_id, filters, pagination)
            stats = stats_to_out(repo.status_counts(owner_id)) if dto.with_stats else None
            return TaskListOut(
                items=[task_to_out(t) for t in page.items],
                meta=page_meta(page),
                stats=stats,
            )

    def list_shared(self, user_id: int, *, page: int = 1, limit: int = 10) -> TaskListOut:
        """List tasks other principals shared with ``user_id``, newest first."""
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["-created_at"])
        with self.ro_uow() as uow:
            result = uow.tasks.list_shared_with(user_id, pagination)
            return TaskListOut(
                items=[task_to_out(t) for t in result.items],
                meta=page_meta(result),
            )
