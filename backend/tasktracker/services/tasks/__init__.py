"""Task service layer: commands, queries, sharing and the status lifecycle."""

from __future__ import annotations

from .access import TaskAccessService
from .command import TaskCommandService
from .dto import (
    PageMeta,
    ShareOut,
    TaskCreateIn,
    TaskListIn,
    TaskListOut,
    TaskOut,
    TaskStatsOut,
    TaskUpdateIn,
)
from .lifecycle import TRANSITIONS, apply_status, can_transition
from .query import TaskQueryService

__all__ = [
    "TaskAccessService",
    "TaskCommandService",
    "TaskQueryService",
    "TRANSITIONS",
    "apply_status",
    "can_transition",
    # DTOs
    "PageMeta",
    "ShareOut",
    "TaskCreateIn",
    "TaskListIn",
    "TaskListOut",
    "TaskOut",
    "TaskStatsOut",
    "TaskUpdateIn",
]
