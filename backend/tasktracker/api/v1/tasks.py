"""Task endpoints: CRUD, status/priority changes, sharing."""

from __future__ import annotations

from flask import Blueprint, request

from tasktracker.api.deps import (
    current_principal,
    json_response,
    no_content,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from tasktracker.schemas import (
    ShareSchema,
    TaskCreateSchema,
    TaskFilterSchema,
    TaskPrioritySchema,
    TaskSchema,
    TaskShareSchema,
    TaskStatsSchema,
    TaskStatusSchema,
    TaskUpdateSchema,
    build_meta,
)
from tasktracker.services.tasks import (
    TaskAccessService,
    TaskCommandService,
    TaskCreateIn,
    TaskListIn,
    TaskListOut,
    TaskQueryService,
    TaskUpdateIn,
)

bp = Blueprint("tasks", __name__, url_prefix="/tasks")

task_schema = TaskSchema()
task_list_schema = TaskSchema(many=True)
task_create_schema = TaskCreateSchema()
task_update_schema = TaskUpdateSchema()
task_status_schema = TaskStatusSchema()
task_priority_schema = TaskPrioritySchema()
task_share_schema = TaskShareSchema()
task_filter_schema = TaskFilterSchema()
stats_schema = TaskStatsSchema()
share_schema = ShareSchema()

DEFAULT_SORT = ("-created_at",)


def _list_body(result: TaskListOut) -> dict:
    meta = build_meta(
        total=result.meta.total,
        page=result.meta.page,
        limit=result.meta.limit,
        pages=result.meta.pages,
    )
    body = {"data": task_list_schema.dump(result.items), "meta": meta}
    if result.stats is not None:
        body["stats"] = stats_schema.dump(result.stats)
    return body


@bp.get("")
@require_auth
@timing
def list_tasks():
    """Return the caller's tasks, filtered and paginated, with status stats."""

    params = task_filter_schema.load(request.args)
    dto = TaskListIn(
        statuses=params["status"],
        priority=params["priority"],
        category_id=params["category_id"],
        search=params["search"],
        due_from=params["due_from"],
        due_to=params["due_to"],
        page=params["page"],
        limit=params["limit"],
        sort=params["sort"] or DEFAULT_SORT,
        with_stats=params["stats"],
    )
    result = TaskQueryService(ctx=service_context()).list(current_principal().id, dto)
    return json_response(_list_body(result))


@bp.get("/shared")
@require_auth
@timing
def list_shared_tasks():
    """Return tasks other users shared with the caller."""

    pagination = parse_pagination()
    result = TaskQueryService(ctx=service_context()).list_shared(
        current_principal().id, page=pagination.page, limit=pagination.limit
    )
    return json_response(_list_body(result))


@bp.post("")
@require_auth
@timing
def create_task():
    payload = task_create_schema.load(request.get_json(silent=True) or {})
    task = TaskCommandService(ctx=service_context()).create(
        current_principal().id, TaskCreateIn(**payload)
    )
    return json_response({"data": task_schema.dump(task)}, status=201)


@bp.get("/<int:task_id>")
@require_auth
@timing
def get_task(task_id: int):
    """Return a task the caller owns or that was shared with them."""

    task = TaskQueryService(ctx=service_context()).get(task_id, current_principal().id)
    return json_response({"data": task_schema.dump(task)})


@bp.put("/<int:task_id>")
@require_auth
@timing
def update_task(task_id: int):
    """Update the fields present in the body. Owner only."""

    payload = task_update_schema.load(request.get_json(silent=True) or {})
    task = TaskCommandService(ctx=service_context()).update(
        task_id, current_principal().id, TaskUpdateIn.from_mapping(payload)
    )
    return json_response({"data": task_schema.dump(task)})


@bp.delete("/<int:task_id>")
@require_auth
@timing
def delete_task(task_id: int):
    TaskCommandService(ctx=service_context()).delete(task_id, current_principal().id)
    return no_content()


@bp.put("/<int:task_id>/status")
@require_auth
@timing
def set_task_status(task_id: int):
    data = task_status_schema.load(request.get_json(silent=True) or {})
    task = TaskCommandService(ctx=service_context()).set_status(
        task_id, current_principal().id, data["status"]
    )
    return json_response({"data": task_schema.dump(task)})


@bp.put("/<int:task_id>/priority")
@require_auth
@timing
def set_task_priority(task_id: int):
    data = task_priority_schema.load(request.get_json(silent=True) or {})
    task = TaskCommandService(ctx=service_context()).set_priority(
        task_id, current_principal().id, data["priority"]
    )
    return json_response({"data": task_schema.dump(task)})


@bp.post("/<int:task_id>/share")
@require_auth
@timing
def share_task(task_id: int):
    """Grant another user read access to the caller's task."""

    data = task_share_schema.load(request.get_json(silent=True) or {})
    result = TaskAccessService(ctx=service_context()).share(
        task_id, current_principal().id, data["user_id"]
    )
    return json_response({"data": share_schema.dump(result)})


@bp.delete("/<int:task_id>/share/<int:user_id>")
@require_auth
@timing
def unshare_task(task_id: int, user_id: int):
    result = TaskAccessService(ctx=service_context()).unshare(
        task_id, current_principal().id, user_id
    )
    return json_response({"data": share_schema.dump(result)})
