"""Common plumbing for application services."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tasktracker.repositories.base import Pagination
from tasktracker.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

MAX_PAGE_LIMIT = 100


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data handed to a service by the HTTP layer.

    :param actor_id: Id of the authenticated principal, if any.
    :param request_id: Correlation id of the originating request.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Parent of every service.

    Services are framework-agnostic: they never read Flask globals and only
    reach the database through a unit of work opened with :meth:`rw_uow` or
    :meth:`ro_uow`.
    """

    READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        """Open a read-only unit of work; flushes and DML inside it raise."""
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.READ_ISOLATION,
            enforce_db_readonly=True,
        )

    @staticmethod
    def ensure_pagination(
        *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Clamp ``page`` to ``>= 1`` and ``limit`` to ``1..MAX_PAGE_LIMIT``."""
        return Pagination(
            page=max(1, int(page)),
            limit=min(max(1, int(limit)), MAX_PAGE_LIMIT),
            sort=list(sort or ()),
        )
