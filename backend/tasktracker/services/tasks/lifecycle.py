"""
Task status state machine.

``archived`` is terminal. Re-applying the current status is always allowed
and leaves the task untouched. :func:`apply_status` is the only code path
that assigns ``Task.status``; it keeps ``completed_at`` in step with it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from tasktracker.models.task import TaskStatus
from tasktracker.services._shared.clock import now_utc
from tasktracker.services._shared.errors import InvalidStatusTransitionError

TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.ARCHIVED}
    ),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.TODO, TaskStatus.COMPLETED, TaskStatus.ARCHIVED}
    ),
    TaskStatus.COMPLETED: frozenset(
        {TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.ARCHIVED}
    ),
    TaskStatus.ARCHIVED: frozenset(),
}


class HasStatus(Protocol):
    status: TaskStatus
    completed_at: datetime | None


def can_transition(current: TaskStatus | str, requested: TaskStatus | str) -> bool:
    """Return True when ``current -> requested`` is allowed (same state included)."""
    current, requested = TaskStatus(current), TaskStatus(requested)
    return current == requested or requested in TRANSITIONS[current]


def apply_status(
    task: HasStatus, requested: TaskStatus | str, now: datetime | None = None
) -> bool:
    """
    Move ``task`` to ``requested`` and derive ``completed_at``.

    Parameters
    ----------
    task:
        Any object with ``status`` and ``completed_at`` attributes.
    requested:
        Target status (enum member or its wire value).
    now:
        Completion instant to record; defaults to the current UTC time.

    Returns
    -------
    bool
        ``True`` when the status actually changed.

    Raises
    ------
    InvalidStatusTransitionError
        When the edge is not in :data:`TRANSITIONS`.
    """
    current = TaskStatus(task.status)
    requested = TaskStatus(requested)

    if current == requested:
        return False
    if requested not in TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, requested.value)

    task.status = requested
    if requested == TaskStatus.COMPLETED:
        if task.completed_at is None:
            task.completed_at = now or now_utc()
    else:
        task.completed_at = None
    return True
