"""Category endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from tasktracker.api.deps import (
    current_principal,
    json_response,
    no_content,
    require_auth,
    service_context,
    timing,
)
from tasktracker.schemas import CategoryCreateSchema, CategorySchema, CategoryUpdateSchema
from tasktracker.services.categories import CategoryCreateIn, CategoryService, CategoryUpdateIn

bp = Blueprint("categories", __name__, url_prefix="/categories")

category_schema = CategorySchema()
category_list_schema = CategorySchema(many=True)
category_create_schema = CategoryCreateSchema()
category_update_schema = CategoryUpdateSchema()


@bp.get("")
@require_auth
@timing
def list_categories():
    """Return the caller's categories ordered by name."""

    rows = CategoryService(ctx=service_context()).list(current_principal().id)
    return json_response({"data": category_list_schema.dump(rows)})


@bp.post("")
@require_auth
@timing
def create_category():
    payload = category_create_schema.load(request.get_json(silent=True) or {})
    row = CategoryService(ctx=service_context()).create(
        current_principal().id, CategoryCreateIn(**payload)
    )
    return json_response({"data": category_schema.dump(row)}, status=201)


@bp.put("/<int:category_id>")
@require_auth
@timing
def update_category(category_id: int):
    payload = category_update_schema.load(request.get_json(silent=True) or {})
    row = CategoryService(ctx=service_context()).update(
        category_id, current_principal().id, CategoryUpdateIn(**payload)
    )
    return json_response({"data": category_schema.dump(row)})


@bp.delete("/<int:category_id>")
@require_auth
@timing
def delete_category(category_id: int):
    """Detach the category from its tasks, then delete it."""

    CategoryService(ctx=service_context()).delete(category_id, current_principal().id)
    return no_content()
