"""Unit tests for task commands and queries."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tasktracker.models.task import TaskPriority, TaskStatus
from tasktracker.services._shared.clock import as_utc
from tasktracker.services._shared.errors import (
    AuthorizationError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from tasktracker.services.tasks import (
    TaskCommandService,
    TaskCreateIn,
    TaskListIn,
    TaskQueryService,
    TaskUpdateIn,
)
from tests.factories.task import TaskFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def owner(session):
    return UserFactory()


@pytest.fixture()
def commands() -> TaskCommandService:
    return TaskCommandService()


@pytest.fixture()
def queries() -> TaskQueryService:
    return TaskQueryService()


# --------------------------------- Create ---------------------------------- #


def test_create_applies_defaults(commands, owner):
    out = commands.create(owner.id, TaskCreateIn(title="  Write report  "))

    assert out.title == "Write report"
    assert out.status == "todo"
    assert out.priority == "medium"
    assert out.completed_at is None
    assert out.owner_id == owner.id
    assert out.shared_with == []


def test_create_deduplicates_tags_in_order(commands, owner):
    out = commands.create(owner.id, TaskCreateIn(title="t", tags=["b", "a", "b", " a "]))

    assert out.tags == ["b", "a"]


def test_create_rejects_negative_estimate(commands, owner):
    with pytest.raises(ValueError):
        commands.create(owner.id, TaskCreateIn(title="t", estimated_hours=-1))


# --------------------------------- Update ---------------------------------- #


def test_update_only_touches_sent_fields(commands, queries, owner):
    created = commands.create(
        owner.id, TaskCreateIn(title="t", description="keep me", priority=TaskPriority.HIGH)
    )

    out = commands.update(created.id, owner.id, TaskUpdateIn.from_mapping({"title": "new"}))

    assert out.title == "new"
    assert out.description == "keep me"
    assert out.priority == "high"


def test_update_can_clear_nullable_fields(commands, owner):
    created = commands.create(owner.id, TaskCreateIn(title="t", description="d", estimated_hours=2))

    out = commands.update(
        created.id,
        owner.id,
        TaskUpdateIn.from_mapping({"description": None, "estimated_hours": None}),
    )

    assert out.description is None
    assert out.estimated_hours is None


def test_update_status_goes_through_lifecycle(commands, owner):
    created = commands.create(owner.id, TaskCreateIn(title="t"))

    done = commands.update(
        created.id, owner.id, TaskUpdateIn.from_mapping({"status": TaskStatus.COMPLETED})
    )
    assert done.status == "completed"
    assert done.completed_at is not None

    reopened = commands.update(
        created.id, owner.id, TaskUpdateIn.from_mapping({"status": TaskStatus.TODO})
    )
    assert reopened.completed_at is None


def test_update_by_non_owner_is_not_found(commands, owner):
    task = TaskFactory(owner=owner)
    stranger = UserFactory()

    with pytest.raises(NotFoundError):
        commands.update(task.id, stranger.id, TaskUpdateIn.from_mapping({"title": "x"}))


def test_update_missing_task_is_not_found(commands, owner):
    with pytest.raises(NotFoundError):
        commands.update(999_999, owner.id, TaskUpdateIn.from_mapping({"title": "x"}))


# ------------------------------ Status/priority ---------------------------- #


def test_set_status_records_and_clears_completion(commands, owner):
    task = TaskFactory(owner=owner)

    done = commands.set_status(task.id, owner.id, "completed")
    assert done.completed_at is not None

    archived = commands.set_status(task.id, owner.id, TaskStatus.ARCHIVED)
    assert archived.status == "archived"
    assert archived.completed_at is None


def test_set_status_from_archived_is_rejected(commands, owner):
    task = TaskFactory(owner=owner, status=TaskStatus.ARCHIVED)

    with pytest.raises(InvalidStatusTransitionError):
        commands.set_status(task.id, owner.id, TaskStatus.TODO)


def test_set_status_same_value_keeps_completion_time(commands, owner):
    task = TaskFactory(owner=owner)
    first = commands.set_status(task.id, owner.id, TaskStatus.COMPLETED)

    again = commands.set_status(task.id, owner.id, TaskStatus.COMPLETED)

    assert as_utc(again.completed_at) == as_utc(first.completed_at)


def test_set_priority(commands, owner):
    task = TaskFactory(owner=owner)

    assert commands.set_priority(task.id, owner.id, "low").priority == "low"


# --------------------------------- Delete ---------------------------------- #


def test_delete_removes_task(commands, queries, owner):
    task = TaskFactory(owner=owner)

    commands.delete(task.id, owner.id)

    with pytest.raises(NotFoundError):
        queries.get(task.id, owner.id)


def test_delete_by_non_owner_is_not_found(commands, owner):
    task = TaskFactory(owner=owner)

    with pytest.raises(NotFoundError):
        commands.delete(task.id, UserFactory().id)


# ---------------------------------- Get ------------------------------------ #


def test_get_own_task(queries, owner):
    task = TaskFactory(owner=owner, title="mine")

    assert queries.get(task.id, owner.id).title == "mine"


def test_get_foreign_task_is_forbidden(queries, owner):
    task = TaskFactory()

    with pytest.raises(AuthorizationError):
        queries.get(task.id, owner.id)


def test_get_missing_task_is_not_found(queries, owner):
    with pytest.raises(NotFoundError):
        queries.get(424242, owner.id)


# --------------------------------- Listing --------------------------------- #


@pytest.fixture()
def board(owner):
    """Five tasks for ``owner`` plus one foreign task."""
    now = datetime(2026, 5, 1, tzinfo=UTC)
    TaskFactory(owner=owner, title="Buy milk", priority=TaskPriority.LOW,
                due_date=now + timedelta(days=1))
    TaskFactory(owner=owner, title="Write REPORT", status=TaskStatus.IN_PROGRESS,
                priority=TaskPriority.HIGH, due_date=now + timedelta(days=5))
    TaskFactory(owner=owner, title="File taxes", status=TaskStatus.COMPLETED,
                completed_at=now, priority=TaskPriority.HIGH)
    TaskFactory(owner=owner, title="Old idea", status=TaskStatus.ARCHIVED,
                description="a report draft")
    TaskFactory(owner=owner, title="Call mom")
    TaskFactory(title="Not yours")
    return now


def test_list_is_owner_scoped_with_stats(queries, owner, board):
    out = queries.list(owner.id, TaskListIn(limit=50))

    assert out.meta.total == 5
    assert "Not yours" not in {t.title for t in out.items}
    assert (out.stats.todo, out.stats.in_progress, out.stats.completed, out.stats.archived) == (
        2, 1, 1, 1,
    )


def test_list_filters_by_status_set(queries, owner, board):
    out = queries.list(
        owner.id, TaskListIn(statuses=[TaskStatus.TODO, TaskStatus.COMPLETED], limit=50)
    )

    assert {t.status for t in out.items} == {"todo", "completed"}
    assert out.meta.total == 3
    # Stats ignore the filters
    assert out.stats.archived == 1


def test_list_filters_by_priority(queries, owner, board):
    out = queries.list(owner.id, TaskListIn(priority=TaskPriority.HIGH))

    assert {t.title for t in out.items} == {"Write REPORT", "File taxes"}


def test_search_matches_title_and_description_case_insensitively(queries, owner, board):
    out = queries.list(owner.id, TaskListIn(search="report"))

    assert {t.title for t in out.items} == {"Write REPORT", "Old idea"}


def test_search_treats_wildcards_literally(queries, owner, board):
    assert queries.list(owner.id, TaskListIn(search="%")).meta.total == 0


def test_list_filters_by_due_range(queries, owner, board):
    out = queries.list(
        owner.id,
        TaskListIn(due_from=board + timedelta(days=2), due_to=board + timedelta(days=10)),
    )

    assert [t.title for t in out.items] == ["Write REPORT"]


def test_list_sorts_and_paginates(queries, owner, board):
    first = queries.list(owner.id, TaskListIn(sort=["title"], page=1, limit=2, with_stats=False))
    third = queries.list(owner.id, TaskListIn(sort=["title"], page=3, limit=2))

    assert [t.title for t in first.items] == ["Buy milk", "Call mom"]
    assert first.stats is None
    assert [t.title for t in third.items] == ["Write REPORT"]
    assert (third.meta.total, third.meta.pages, third.meta.page) == (5, 3, 3)


def test_list_clamps_limit(queries, owner, board):
    out = queries.list(owner.id, TaskListIn(limit=10_000))

    assert out.meta.limit == 100
