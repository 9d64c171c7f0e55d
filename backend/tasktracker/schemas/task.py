"""Task resource schemas (camelCase on the wire)."""

from __future__ import annotations

from datetime import UTC
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate, validates

from tasktracker.models.task import (
    DESCRIPTION_MAX_LENGTH,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
)
from tasktracker.services._shared.clock import now_utc

from .common import PaginationQuerySchema, TrimmedString


def _due_date(data_key: str = "dueDate", **kwargs: Any) -> fields.AwareDateTime:
    return fields.AwareDateTime(data_key=data_key, default_timezone=UTC, **kwargs)


def _tags(**kwargs: Any) -> fields.List:
    return fields.List(TrimmedString(validate=validate.Length(max=TAG_MAX_LENGTH)), **kwargs)


class TaskCreateSchema(Schema):
    """Payload for creating a task."""

    title = TrimmedString(required=True, validate=validate.Length(min=1, max=TITLE_MAX_LENGTH))
    description = TrimmedString(
        load_default=None, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH)
    )
    priority = fields.Enum(TaskPriority, by_value=True, load_default=TaskPriority.MEDIUM)
    due_date = _due_date(load_default=None)
    category_id = fields.Integer(load_default=None, data_key="categoryId")
    tags = _tags(load_default=list)
    estimated_hours = fields.Float(
        load_default=None, data_key="estimatedHours", validate=validate.Range(min=0)
    )

    @validates("due_date")
    def _due_in_future(self, value, **_: Any) -> None:
        if value is not None and value < now_utc():
            raise ValidationError("Due date must be in the future")


class TaskUpdateSchema(Schema):
    """Partial update; only keys present in the body are returned by ``load``."""

    title = TrimmedString(validate=validate.Length(min=1, max=TITLE_MAX_LENGTH))
    description = TrimmedString(
        allow_none=True, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH)
    )
    status = fields.Enum(TaskStatus, by_value=True)
    priority = fields.Enum(TaskPriority, by_value=True)
    due_date = _due_date(allow_none=True)
    category_id = fields.Integer(allow_none=True, data_key="categoryId")
    tags = _tags()
    estimated_hours = fields.Float(
        allow_none=True, data_key="estimatedHours", validate=validate.Range(min=0)
    )


class TaskStatusSchema(Schema):
    status = fields.Enum(TaskStatus, by_value=True, required=True)


class TaskPrioritySchema(Schema):
    priority = fields.Enum(TaskPriority, by_value=True, required=True)


class TaskShareSchema(Schema):
    user_id = fields.Integer(required=True, data_key="userId", validate=validate.Range(min=1))


class TaskFilterSchema(PaginationQuerySchema):
    """Query parameters accepted by ``GET /tasks``."""

    class Meta:
        unknown = EXCLUDE

    status = fields.String(load_default=None)
    priority = fields.Enum(TaskPriority, by_value=True, load_default=None)
    category_id = fields.Integer(load_default=None, data_key="category")
    search = fields.String(load_default=None, validate=validate.Length(max=200))
    due_from = _due_date("dueFrom", load_default=None)
    due_to = _due_date("dueTo", load_default=None)
    stats = fields.Boolean(load_default=True)

    @validates("status")
    def _known_statuses(self, value: str | None, **_: Any) -> None:
        if value is None:
            return
        allowed = {s.value for s in TaskStatus}
        for raw in value.split(","):
            if raw.strip() not in allowed:
                raise ValidationError(f"Invalid status: {raw.strip()}")

    @post_load
    def split_statuses(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("status")
        data["status"] = [TaskStatus(s.strip()) for s in raw.split(",")] if raw else None
        return data


class TaskSchema(Schema):
    """Representation of the task entity."""

    id = fields.Integer(required=True)
    title = fields.String(required=True)
    description = fields.String(allow_none=True)
    status = fields.String(required=True)
    priority = fields.String(required=True)
    due_date = fields.DateTime(allow_none=True, data_key="dueDate")
    category_id = fields.Integer(allow_none=True, data_key="categoryId")
    tags = fields.List(fields.String())
    estimated_hours = fields.Float(allow_none=True, data_key="estimatedHours")
    completed_at = fields.DateTime(allow_none=True, data_key="completedAt")
    owner_id = fields.Integer(required=True, data_key="ownerId")
    shared_with = fields.List(fields.Integer(), data_key="sharedWith")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class TaskStatsSchema(Schema):
    todo = fields.Integer()
    in_progress = fields.Integer(data_key="inProgress")
    completed = fields.Integer()
    archived = fields.Integer()


class ShareSchema(Schema):
    task_id = fields.Integer(data_key="taskId")
    shared_with = fields.List(fields.Integer(), data_key="sharedWith")
