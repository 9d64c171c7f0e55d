"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`tasktracker.services` without knowing internal
structure.

Re-exports
----------
- Base primitives (from ``tasktracker.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Authentication (from ``tasktracker.services.auth``)
    * :class:`SessionService`

- Tasks (from ``tasktracker.services.tasks``)
    * :class:`TaskCommandService`, :class:`TaskQueryService`,
      :class:`TaskAccessService`

- Categories (from ``tasktracker.services.categories``)
    * :class:`CategoryService`, :class:`CategoryCounter`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth import SessionService
from .categories import CategoryCounter, CategoryService
from .tasks import TaskAccessService, TaskCommandService, TaskQueryService

__all__ = [
    "BaseService",
    "ServiceContext",
    "SessionService",
    "CategoryCounter",
    "CategoryService",
    "TaskAccessService",
    "TaskCommandService",
    "TaskQueryService",
]
