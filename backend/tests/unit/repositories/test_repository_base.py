"""Persistence helpers shared by every repository."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from tasktracker.models.task import Task, TaskStatus
from tasktracker.repositories import TaskRepository, UserRepository
from tasktracker.repositories.base import Page, Pagination, parse_sort_tokens
from tests.factories.task import TaskFactory
from tests.factories.user import UserFactory


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (["-created_at"], [("created_at", True)]),
        (["title:asc", "due_date:desc"], [("title", False), ("due_date", True)]),
        ([" ", ""], []),
    ],
)
def test_parse_sort_tokens(raw, expected):
    assert parse_sort_tokens(raw) == expected


@pytest.mark.parametrize(("total", "limit", "pages"), [(0, 10, 0), (10, 10, 1), (11, 10, 2)])
def test_page_count(total, limit, pages):
    assert Page(items=[], total=total, page=1, limit=limit).pages == pages


def test_unknown_sort_keys_are_ignored(session):
    owner = UserFactory()
    ids = [TaskFactory(owner=owner).id for _ in range(3)]
    TaskFactory()
    repo = TaskRepository(session=session)

    page = repo.paginate_stmt(
        select(Task).where(Task.owner_id == owner.id),
        Pagination(page=1, limit=10, sort=["password_hash", "-nope"]),
    )

    assert [t.id for t in page.items] == sorted(ids)
    assert page.total == 3


def test_assign_updates_rejects_non_whitelisted_fields(session):
    task = TaskFactory()
    repo = TaskRepository(session=session)

    with pytest.raises(ValueError, match="status"):
        repo.assign_updates(task, {"status": TaskStatus.ARCHIVED})
    with pytest.raises(ValueError, match="owner_id"):
        repo.assign_updates(task, {"owner_id": 1})


def test_user_lookups_normalize_email(session):
    user = UserFactory(email="mixed@example.com", username="mixy")
    repo = UserRepository(session=session)

    assert repo.get_by_email("  MIXED@example.com ") is user
    assert repo.exists_by_username("mixy")
    assert not repo.exists_by_email("other@example.com")
    assert repo.exists_by_id(user.id)
