from __future__ import annotations

import logging
from dataclasses import asdict

from sqlalchemy.exc import IntegrityError

from tasktracker.models.category import Category
from tasktracker.repositories.category import CategoryRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.errors import ConflictError, NotFoundError

from .counter import CategoryCounter
from .dto import CategoryCreateIn, CategoryOut, CategoryUpdateIn

logger = logging.getLogger(__name__)

_NAME_TAKEN = "Category with this name already exists"


def category_to_out(row: Category) -> CategoryOut:
    return CategoryOut(
        id=row.id,
        name=row.name,
        color=row.color,
        task_count=row.task_count,
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class CategoryService(BaseService):
    """Owner-scoped category management.

    A category that exists but belongs to someone else is reported as
    missing.
    """

    def list(self, owner_id: int) -> list[CategoryOut]:
        """Return the owner's categories ordered by name."""
        with self.ro_uow() as uow:
            repo: CategoryRepository = uow.categories
            rows = repo.list(filters={"owner_id": owner_id}, sort=["name"])
            return [category_to_out(row) for row in rows]

    def get(self, category_id: int, owner_id: int) -> CategoryOut:
        with self.ro_uow() as uow:
            row = uow.categories.get_owned(category_id, owner_id)
            if row is None:
                raise NotFoundError("Category", category_id)
            return category_to_out(row)

    def create(self, owner_id: int, dto: CategoryCreateIn) -> CategoryOut:
        """
        Create a category with a zero count.

        :raises ConflictError: The owner already has a category with that name.
        """
        try:
            with self.rw_uow() as uow:
                repo: CategoryRepository = uow.categories
                if repo.name_taken(owner_id, dto.name):
                    raise ConflictError("Category", _NAME_TAKEN)
                row = repo.model(name=dto.name, color=dto.color, owner_id=owner_id)
                repo.add(row)
                out = category_to_out(row)
        except IntegrityError as exc:
            raise ConflictError("Category", _NAME_TAKEN) from exc

        logger.info("Category created", extra={"category_id": out.id, "user_id": owner_id})
        return out

    def update(self, category_id: int, owner_id: int, dto: CategoryUpdateIn) -> CategoryOut:
        """
        Rename and/or recolor a category.

        :raises NotFoundError: Missing or not owned.
        :raises ConflictError: The new name is taken by another category.
        """
        changes = {k: v for k, v in asdict(dto).items() if v is not None}
        try:
            with self.rw_uow() as uow:
                repo: CategoryRepository = uow.categories
                row = repo.get_owned(category_id, owner_id)
                if row is None:
                    raise NotFoundError("Category", category_id)
                if "name" in changes and repo.name_taken(
                    owner_id, changes["name"], exclude_id=row.id
                ):
                    raise ConflictError("Category", _NAME_TAKEN)
                repo.assign_updates(row, changes)
                out = category_to_out(row)
        except IntegrityError as exc:
            raise ConflictError("Category", _NAME_TAKEN) from exc

        logger.info("Category updated", extra={"category_id": category_id, "user_id": owner_id})
        return out

    def delete(self, category_id: int, owner_id: int) -> None:
        """
        Detach every referencing task, then remove the category.

        Succeeds regardless of the current count.

        :raises NotFoundError: Missing or not owned.
        """
        with self.rw_uow() as uow:
            repo: CategoryRepository = uow.categories
            row = repo.get_owned(category_id, owner_id)
            if row is None:
                raise NotFoundError("Category", category_id)
            counter = CategoryCounter(categories=repo, tasks=uow.tasks)
            counter.on_category_delete(row.id)
            repo.delete(row)

        logger.info("Category deleted", extra={"category_id": category_id, "user_id": owner_id})
