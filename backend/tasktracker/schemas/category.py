"""Category resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from tasktracker.models.category import DEFAULT_CATEGORY_COLOR, HEX_COLOR_RE

from .common import TrimmedString

_name = dict(validate=validate.Length(min=1, max=50))
_color = dict(
    validate=validate.Regexp(HEX_COLOR_RE, error="Please provide a valid hex color (e.g., #3B82F6)")
)


class CategoryCreateSchema(Schema):
    """Payload for creating a category."""

    name = TrimmedString(required=True, **_name)
    color = fields.String(load_default=DEFAULT_CATEGORY_COLOR, **_color)


class CategoryUpdateSchema(Schema):
    """Partial update; absent keys are left unchanged."""

    name = TrimmedString(**_name)
    color = fields.String(**_color)


class CategorySchema(Schema):
    """Representation of the category entity."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    color = fields.String(required=True)
    task_count = fields.Integer(required=True, data_key="taskCount")
    owner_id = fields.Integer(required=True, data_key="ownerId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
