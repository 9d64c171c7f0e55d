"""Keep ``Category.task_count`` in step with the tasks that reference it."""

from __future__ import annotations

import logging

from tasktracker.models.category import Category
from tasktracker.repositories.category import CategoryRepository
from tasktracker.repositories.task import TaskRepository
from tasktracker.services._shared.errors import BadRequestError

logger = logging.getLogger(__name__)


class CategoryCounter:
    """
    Atomic adjustments of the denormalized per-category task count.

    Every adjustment is one ``UPDATE ... SET task_count = task_count + :d``
    statement, so concurrent creations and deletions against the same
    category never overwrite each other. A change of category is two such
    statements; between them the total is briefly off by one.

    The counter runs inside the caller's unit of work and never commits.
    """

    def __init__(self, *, categories: CategoryRepository, tasks: TaskRepository) -> None:
        self.categories = categories
        self.tasks = tasks

    def resolve(self, owner_id: int, category_id: int | None) -> Category | None:
        """
        Return the caller's category for ``category_id``.

        :raises BadRequestError: The id does not name a category owned by
            ``owner_id``.
        """
        if category_id is None:
            return None
        category = self.categories.get_owned(category_id, owner_id)
        if category is None:
            raise BadRequestError("Invalid category")
        return category

    def on_create(self, category_id: int | None) -> None:
        if category_id is not None:
            self._adjust(category_id, +1)

    def on_delete(self, category_id: int | None) -> None:
        if category_id is not None:
            self._adjust(category_id, -1)

    def on_category_change(self, old_id: int | None, new_id: int | None) -> None:
        if old_id == new_id:
            return
        self.on_delete(old_id)
        self.on_create(new_id)

    def on_category_delete(self, category_id: int) -> int:
        """Null the reference on every task pointing at ``category_id``.

        :returns: Number of tasks detached.
        """
        detached = self.tasks.detach_category(category_id)
        logger.info(
            "Tasks detached from category",
            extra={"category_id": category_id, "count": detached},
        )
        return detached

    def _adjust(self, category_id: int, delta: int) -> None:
        if not self.categories.adjust_task_count(category_id, delta):
            # Row gone or the count would drop below zero
            logger.warning(
                "Category count adjustment skipped",
                extra={"category_id": category_id, "count": delta},
            )
