"""Category repository with the atomic task-count delta."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, update

from tasktracker.models.category import Category
from tasktracker.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Persistence-only repository for :class:`Category`."""

    model = Category

    def _sortable_fields(self):
        return {
            "name": Category.name,
            "created_at": Category.created_at,
            "task_count": Category.task_count,
        }

    def _filterable_fields(self):
        return {"owner_id": Category.owner_id}

    def _updatable_fields(self):
        # task_count is intentionally absent: see ``adjust_task_count``
        return {"name", "color"}

    def get_owned(self, category_id: int, owner_id: int) -> Category | None:
        stmt = select(Category).where(Category.id == category_id, Category.owner_id == owner_id)
        return cast(Category | None, self.session.execute(stmt).scalars().first())

    def name_taken(self, owner_id: int, name: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(Category.id).where(
            Category.owner_id == owner_id, Category.name == name.strip()
        )
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def adjust_task_count(self, category_id: int, delta: int) -> bool:
        """Apply ``task_count = task_count + delta`` in a single statement.

        The row is left untouched when the result would go negative.

        :returns: ``True`` when a row was updated.
        """
        stmt = (
            update(Category)
            .where(Category.id == category_id, Category.task_count + delta >= 0)
            .values(task_count=Category.task_count + delta)
            .execution_options(synchronize_session="fetch")
        )
        return bool(self.session.execute(stmt).rowcount)
