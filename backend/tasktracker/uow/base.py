"""Transaction boundary contract used by the service layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tasktracker.repositories import (
        CategoryRepository,
        RefreshSessionRepository,
        TaskRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    One use-case, one transaction.

    Used as a context manager: a clean exit commits, an exception rolls back
    and propagates. The repositories below share the unit's session.
    """

    users: UserRepository
    tasks: TaskRepository
    categories: CategoryRepository
    sessions: RefreshSessionRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
