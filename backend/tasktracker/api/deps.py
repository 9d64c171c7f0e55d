"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request
from marshmallow import EXCLUDE

from tasktracker.core.errors import Unauthorized
from tasktracker.core.logger import ensure_request_id
from tasktracker.core.security import get_session_store, get_token_codec
from tasktracker.repositories.base import Pagination
from tasktracker.schemas.common import PaginationQuerySchema
from tasktracker.services._shared.base import ServiceContext
from tasktracker.services.auth import PrincipalOut, SessionService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def parse_pagination(default_limit: int = 10, max_limit: int = 100) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(
        default_limit=default_limit, max_limit=max_limit, unknown=EXCLUDE
    )
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def service_context() -> ServiceContext:
    principal = getattr(g, "principal", None)
    return ServiceContext(
        actor_id=principal.id if principal else None,
        request_id=ensure_request_id(),
    )


def session_service() -> SessionService:
    """Build a :class:`SessionService` over the app's codec and store."""

    return SessionService(
        codec=get_token_codec(),
        store=get_session_store(),
        ctx=service_context(),
    )


def bearer_token() -> str:
    """Extract the raw token from ``Authorization: Bearer <token>``.

    :raises Unauthorized: Header missing or not a bearer credential.
    """

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Missing or malformed Authorization header")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthorized("Missing or malformed Authorization header")
    return token


def current_principal() -> PrincipalOut:
    """Return the principal resolved by :func:`require_auth`."""

    return cast(PrincipalOut, g.principal)


def require_auth(func: F) -> F:
    """Resolve the bearer access token to a principal before the view runs."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        g.principal = session_service().current_principal(token)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    response = current_app.response_class(status=204)
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
