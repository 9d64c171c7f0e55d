"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

import re
from typing import Any

from marshmallow import Schema, fields, post_load, validate

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(token: str) -> str:
    """``"-createdAt"`` -> ``"-created_at"``; already-snake tokens pass through."""
    return _CAMEL_BOUNDARY.sub("_", token).lower()


class TrimmedString(fields.String):
    """String field that strips surrounding whitespace before validation."""

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str:
        return super()._deserialize(value, attr, data, **kwargs).strip()


class SortQuerySchema(Schema):
    """Parse comma-separated ``sort`` query parameters into a list."""

    sort = fields.String(load_default="")

    @post_load
    def split_sort(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("sort") or ""
        if isinstance(raw, str):
            data["sort"] = [to_snake(seg.strip()) for seg in raw.split(",") if seg.strip()]
        return data


class PaginationQuerySchema(SortQuerySchema):
    """Validate pagination parameters with configurable defaults."""

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        limit = data.get("limit", self._default_limit)
        data["limit"] = min(max(limit, 1), self._max_limit)
        data.setdefault("page", 1)
        return data


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    pages = fields.Integer(required=True)


def build_meta(*, total: int, page: int, limit: int, pages: int | None = None) -> dict[str, int]:
    """Return a ``meta`` mapping for paginated responses."""
    if pages is None:
        pages = (int(total) + int(limit) - 1) // int(limit) if limit else 0
    return {"total": int(total), "page": int(page), "limit": int(limit), "pages": int(pages)}
