"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    LogoutSchema,
    PrincipalSchema,
    RefreshSchema,
    RegisterSchema,
    RegistrationSchema,
    TokenPairSchema,
)
from .category import CategoryCreateSchema, CategorySchema, CategoryUpdateSchema
from .common import MetaSchema, PaginationQuerySchema, SortQuerySchema, build_meta
from .task import (
    ShareSchema,
    TaskCreateSchema,
    TaskFilterSchema,
    TaskPrioritySchema,
    TaskSchema,
    TaskShareSchema,
    TaskStatsSchema,
    TaskStatusSchema,
    TaskUpdateSchema,
)

__all__ = [
    "LoginSchema",
    "LogoutSchema",
    "PrincipalSchema",
    "RefreshSchema",
    "RegisterSchema",
    "RegistrationSchema",
    "TokenPairSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "MetaSchema",
    "build_meta",
    "CategoryCreateSchema",
    "CategorySchema",
    "CategoryUpdateSchema",
    "ShareSchema",
    "TaskCreateSchema",
    "TaskFilterSchema",
    "TaskPrioritySchema",
    "TaskSchema",
    "TaskShareSchema",
    "TaskStatsSchema",
    "TaskStatusSchema",
    "TaskUpdateSchema",
]
