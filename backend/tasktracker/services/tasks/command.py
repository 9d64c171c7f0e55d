from __future__ import annotations

import logging

from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.repositories.task import TaskRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.clock import now_utc
from tasktracker.services._shared.errors import NotFoundError
from tasktracker.services._shared.policies.common import assert_owner
from tasktracker.services.categories.counter import CategoryCounter

from ._converters import task_to_out
from .dto import TaskCreateIn, TaskOut, TaskUpdateIn
from .lifecycle import apply_status

logger = logging.getLogger(__name__)


class TaskCommandService(BaseService):
    """
    Task mutations. Only the owner may mutate a task.

    A task that exists but belongs to someone else is reported as missing.
    Category references go through :class:`CategoryCounter`, status changes
    through :func:`~tasktracker.services.tasks.lifecycle.apply_status`.
    """

    def create(self, owner_id: int, dto: TaskCreateIn) -> TaskOut:
        """
        Create a task in ``todo`` and count it against its category.

        :raises BadRequestError: ``category_id`` is not one of the owner's.
        """
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            counter = CategoryCounter(categories=uow.categories, tasks=repo)
            category = counter.resolve(owner_id, dto.category_id)

            task = repo.model(
                title=dto.title,
                description=dto.description,
                status=TaskStatus.TODO,
                priority=TaskPriority(dto.priority),
                due_date=dto.due_date,
                category_id=category.id if category else None,
                tags=list(dto.tags),
                estimated_hours=dto.estimated_hours,
                owner_id=owner_id,
            )
            repo.add(task)
            counter.on_create(task.category_id)
            out = task_to_out(task)

        logger.info("Task created", extra={"task_id": out.id, "user_id": owner_id})
        return out

    def update(self, task_id: int, caller_id: int, dto: TaskUpdateIn) -> TaskOut:
        """
        Apply the fields present in ``dto``.

        :raises NotFoundError: Missing or not owned by ``caller_id``.
        :raises InvalidStatusTransitionError: Illegal status edge.
        :raises BadRequestError: New category is not one of the caller's.
        """
        changes = dto.changes()
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            task = self._get_owned(repo, task_id, caller_id)

            status = changes.pop("status", None)
            if status is not None:
                apply_status(task, status, now_utc())

            if "category_id" in changes:
                new_id = changes.pop("category_id")
                if new_id != task.category_id:
                    counter = CategoryCounter(categories=uow.categories, tasks=repo)
                    counter.resolve(caller_id, new_id)
                    old_id = task.category_id
                    task.category_id = new_id
                    counter.on_category_change(old_id, new_id)

            repo.assign_updates(task, changes)
            out = task_to_out(task)

        logger.info("Task updated", extra={"task_id": task_id, "user_id": caller_id})
        return out

    def delete(self, task_id: int, caller_id: int) -> None:
        """
        Delete a task and release its category slot.

        :raises NotFoundError: Missing or not owned by ``caller_id``.
        """
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            task = self._get_owned(repo, task_id, caller_id)
            category_id = task.category_id
            repo.delete(task)
            CategoryCounter(categories=uow.categories, tasks=repo).on_delete(category_id)

        logger.info("Task deleted", extra={"task_id": task_id, "user_id": caller_id})

    def set_status(self, task_id: int, caller_id: int, status: TaskStatus | str) -> TaskOut:
        """
        :raises NotFoundError: Missing or not owned by ``caller_id``.
        :raises InvalidStatusTransitionError: Illegal status edge.
        """
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            task = self._get_owned(repo, task_id, caller_id)
            changed = apply_status(task, status, now_utc())
            repo.flush()
            out = task_to_out(task)

        if changed:
            logger.info(
                "Task status changed",
                extra={"task_id": task_id, "user_id": caller_id, "status": out.status},
            )
        return out

    def set_priority(
        self, task_id: int, caller_id: int, priority: TaskPriority | str
    ) -> TaskOut:
        """:raises NotFoundError: Missing or not owned by ``caller_id``."""
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            task = self._get_owned(repo, task_id, caller_id)
            repo.assign_updates(task, {"priority": TaskPriority(priority)})
            return task_to_out(task)

    @staticmethod
    def _get_owned(repo: TaskRepository, task_id: int, caller_id: int) -> Task:
        task = repo.get_for_update(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        assert_owner(task, caller_id, entity="Task")
        return task
