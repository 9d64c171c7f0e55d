from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from tasktracker.models.task import Task
from tasktracker.repositories.task import TaskRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.errors import BadRequestError, ConflictError, NotFoundError
from tasktracker.services._shared.policies.common import assert_owner, is_owner

from .dto import ShareOut

logger = logging.getLogger(__name__)

_ALREADY_SHARED = "Task is already shared with this user"


class TaskAccessService(BaseService):
    """Grant and withdraw read access to a task. Owner only."""

    def share(self, task_id: int, owner_id: int, target_id: int) -> ShareOut:
        """
        Give ``target_id`` read access to the owner's task.

        :raises NotFoundError: Task missing or not owned, or target user missing.
        :raises BadRequestError: The owner tried to share with themselves.
        :raises ConflictError: Already shared with the target.
        """
        try:
            with self.rw_uow() as uow:
                repo: TaskRepository = uow.tasks
                task = self._get_owned(repo, task_id, owner_id)
                if is_owner(actor_id=target_id, owner_id=task.owner_id):
                    raise BadRequestError("Cannot share task with yourself")

                target = uow.users.get(target_id)
                if target is None:
                    raise NotFoundError("User", target_id)
                if repo.is_shared_with(task.id, target.id):
                    raise ConflictError("Task", _ALREADY_SHARED)

                repo.add_share(task, target)
                out = ShareOut(task_id=task.id, shared_with=sorted(task.shared_user_ids))
        except IntegrityError as exc:
            # A concurrent share of the same pair won the insert
            raise ConflictError("Task", _ALREADY_SHARED) from exc

        logger.info("Task shared", extra={"task_id": task_id, "user_id": target_id})
        return out

    def unshare(self, task_id: int, owner_id: int, target_id: int) -> ShareOut:
        """
        Withdraw read access. Removing a principal that holds none is a no-op.

        :raises NotFoundError: Task missing or not owned.
        """
        with self.rw_uow() as uow:
            repo: TaskRepository = uow.tasks
            task = self._get_owned(repo, task_id, owner_id)
            removed = repo.remove_share(task, target_id)
            out = ShareOut(task_id=task.id, shared_with=sorted(task.shared_user_ids))

        if removed:
            logger.info("Task unshared", extra={"task_id": task_id, "user_id": target_id})
        return out

    @staticmethod
    def _get_owned(repo: TaskRepository, task_id: int, owner_id: int) -> Task:
        task = repo.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        assert_owner(task, owner_id, entity="Task")
        return task
