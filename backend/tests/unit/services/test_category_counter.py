"""Category task counts stay in step with task create/move/delete."""

from __future__ import annotations

import pytest

from tasktracker.repositories import CategoryRepository, TaskRepository
from tasktracker.services._shared.errors import BadRequestError, ConflictError, NotFoundError
from tasktracker.services.categories import (
    CategoryCounter,
    CategoryCreateIn,
    CategoryService,
    CategoryUpdateIn,
)
from tasktracker.services.tasks import (
    TaskCommandService,
    TaskCreateIn,
    TaskQueryService,
    TaskUpdateIn,
)
from tasktracker.uow import SQLAlchemyUnitOfWork
from tests.factories.category import CategoryFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def owner(session):
    return UserFactory()


@pytest.fixture()
def categories() -> CategoryService:
    return CategoryService()


@pytest.fixture()
def tasks() -> TaskCommandService:
    return TaskCommandService()


def _count(categories: CategoryService, category_id: int, owner_id: int) -> int:
    return categories.get(category_id, owner_id).task_count


def _new_task(tasks: TaskCommandService, owner_id: int, category_id: int | None, title="t"):
    return tasks.create(owner_id, TaskCreateIn(title=title, category_id=category_id))


def test_new_category_starts_at_zero(categories, owner):
    out = categories.create(owner.id, CategoryCreateIn(name="Inbox"))

    assert out.task_count == 0
    assert out.color == "#3B82F6"


def test_create_increments(categories, tasks, owner):
    cat = categories.create(owner.id, CategoryCreateIn(name="Work"))

    for i in range(3):
        _new_task(tasks, owner.id, cat.id, title=f"task {i}")

    assert _count(categories, cat.id, owner.id) == 3


def test_delete_decrements(categories, tasks, owner):
    cat = categories.create(owner.id, CategoryCreateIn(name="Work"))
    first = _new_task(tasks, owner.id, cat.id)
    _new_task(tasks, owner.id, cat.id)

    tasks.delete(first.id, owner.id)

    assert _count(categories, cat.id, owner.id) == 1


def test_moving_a_task_shifts_one_count(categories, tasks, owner):
    work = categories.create(owner.id, CategoryCreateIn(name="Work"))
    home = categories.create(owner.id, CategoryCreateIn(name="Home"))
    task = _new_task(tasks, owner.id, work.id)

    tasks.update(task.id, owner.id, TaskUpdateIn.from_mapping({"category_id": home.id}))

    assert _count(categories, work.id, owner.id) == 0
    assert _count(categories, home.id, owner.id) == 1


def test_clearing_the_category_decrements(categories, tasks, owner):
    work = categories.create(owner.id, CategoryCreateIn(name="Work"))
    task = _new_task(tasks, owner.id, work.id)

    out = tasks.update(task.id, owner.id, TaskUpdateIn.from_mapping({"category_id": None}))

    assert out.category_id is None
    assert _count(categories, work.id, owner.id) == 0


def test_update_without_category_change_keeps_count(categories, tasks, owner):
    work = categories.create(owner.id, CategoryCreateIn(name="Work"))
    task = _new_task(tasks, owner.id, work.id)

    tasks.update(task.id, owner.id, TaskUpdateIn.from_mapping({"category_id": work.id}))
    tasks.update(task.id, owner.id, TaskUpdateIn.from_mapping({"title": "renamed"}))

    assert _count(categories, work.id, owner.id) == 1


def test_foreign_category_is_rejected_and_uncounted(categories, tasks, owner):
    theirs = CategoryFactory()

    with pytest.raises(BadRequestError, match="Invalid category"):
        _new_task(tasks, owner.id, theirs.id)

    assert _count(categories, theirs.id, theirs.owner_id) == 0


def test_moving_to_foreign_category_is_rejected(categories, tasks, owner):
    mine = categories.create(owner.id, CategoryCreateIn(name="Mine"))
    theirs = CategoryFactory()
    task = _new_task(tasks, owner.id, mine.id)

    with pytest.raises(BadRequestError):
        tasks.update(task.id, owner.id, TaskUpdateIn.from_mapping({"category_id": theirs.id}))

    assert _count(categories, mine.id, owner.id) == 1


def test_deleting_a_category_detaches_its_tasks(categories, tasks, owner):
    work = categories.create(owner.id, CategoryCreateIn(name="Work"))
    kept = _new_task(tasks, owner.id, work.id)
    _new_task(tasks, owner.id, work.id)

    categories.delete(work.id, owner.id)

    with pytest.raises(NotFoundError):
        categories.get(work.id, owner.id)
    assert TaskQueryService().get(kept.id, owner.id).category_id is None


def test_work_and_personal_scenario(categories, tasks, owner):
    work = categories.create(owner.id, CategoryCreateIn(name="Work"))
    personal = categories.create(owner.id, CategoryCreateIn(name="Personal"))
    a = _new_task(tasks, owner.id, work.id, title="a")
    b = _new_task(tasks, owner.id, work.id, title="b")
    _new_task(tasks, owner.id, work.id, title="c")

    tasks.update(a.id, owner.id, TaskUpdateIn.from_mapping({"category_id": personal.id}))
    tasks.delete(b.id, owner.id)

    assert _count(categories, work.id, owner.id) == 1
    assert _count(categories, personal.id, owner.id) == 1


def test_counter_never_goes_negative(owner):
    cat = CategoryFactory(owner=owner)

    with SQLAlchemyUnitOfWork() as uow:
        counter = CategoryCounter(categories=uow.categories, tasks=uow.tasks)
        counter.on_delete(cat.id)

    assert CategoryService().get(cat.id, owner.id).task_count == 0


def test_adjust_reports_refusal(session, owner):
    cat = CategoryFactory(owner=owner)
    repo = CategoryRepository(session=session)

    assert repo.adjust_task_count(cat.id, -1) is False
    assert repo.adjust_task_count(cat.id, +2) is True
    assert repo.adjust_task_count(cat.id, -2) is True
    assert repo.adjust_task_count(cat.id + 1000, +1) is False


def test_detach_category_reports_rows(session, owner):
    cat = CategoryFactory(owner=owner)
    tasks_repo = TaskRepository(session=session)

    assert tasks_repo.detach_category(cat.id) == 0


# ------------------------------ Category CRUD ------------------------------ #


def test_list_is_owner_scoped_and_sorted(categories, owner):
    categories.create(owner.id, CategoryCreateIn(name="Zeta"))
    categories.create(owner.id, CategoryCreateIn(name="Alpha"))
    CategoryFactory(name="Alpha")

    names = [c.name for c in categories.list(owner.id)]

    assert names == ["Alpha", "Zeta"]


def test_duplicate_name_conflicts_per_owner(categories, owner):
    categories.create(owner.id, CategoryCreateIn(name="Work"))

    with pytest.raises(ConflictError):
        categories.create(owner.id, CategoryCreateIn(name="  Work "))

    other = UserFactory()
    assert categories.create(other.id, CategoryCreateIn(name="Work")).name == "Work"


def test_update_renames_and_recolors(categories, owner):
    cat = categories.create(owner.id, CategoryCreateIn(name="Work"))

    out = categories.update(cat.id, owner.id, CategoryUpdateIn(name="Job", color="#ff0000"))

    assert (out.name, out.color) == ("Job", "#ff0000")


def test_update_to_taken_name_conflicts(categories, owner):
    categories.create(owner.id, CategoryCreateIn(name="Work"))
    home = categories.create(owner.id, CategoryCreateIn(name="Home"))

    with pytest.raises(ConflictError):
        categories.update(home.id, owner.id, CategoryUpdateIn(name="Work"))


def test_foreign_category_is_not_found(categories, owner):
    theirs = CategoryFactory()

    with pytest.raises(NotFoundError):
        categories.update(theirs.id, owner.id, CategoryUpdateIn(name="x"))
    with pytest.raises(NotFoundError):
        categories.delete(theirs.id, owner.id)
