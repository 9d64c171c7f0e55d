"""Problem-details (RFC 7807) responses for every error the API can raise.

Bodies are served as ``application/problem+json`` and always carry
``status``, ``code``, ``detail`` and the correlation ``request_id``.
Validation failures add ``details.errors`` keyed by wire field name.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from tasktracker.core.logger import ensure_request_id
from tasktracker.services._shared.errors import (
    AuthorizationError,
    BadRequestError,
    ConflictError,
    InvalidCredentialsError,
    InvalidStatusTransitionError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Codes for statuses reached through werkzeug's HTTPException.
HTTP_CODES: Mapping[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

# Service error -> (status, code). First isinstance match wins.
SERVICE_ERROR_MAP: Mapping[type[ServiceError], tuple[int, str]] = {
    InvalidCredentialsError: (HTTPStatus.UNAUTHORIZED, "invalid_credentials"),
    InvalidTokenError: (HTTPStatus.UNAUTHORIZED, "invalid_token"),
    UnauthorizedError: (HTTPStatus.UNAUTHORIZED, "unauthorized"),
    AuthorizationError: (HTTPStatus.FORBIDDEN, "forbidden"),
    NotFoundError: (HTTPStatus.NOT_FOUND, "not_found"),
    ConflictError: (HTTPStatus.CONFLICT, "conflict"),
    InvalidStatusTransitionError: (HTTPStatus.BAD_REQUEST, "invalid_status_transition"),
    BadRequestError: (HTTPStatus.BAD_REQUEST, "bad_request"),
}


class APIError(Exception):
    """
    An error with a fixed HTTP status and a stable machine-readable code.

    :param message: Client-safe description, rendered as ``detail``.
    :param status_code: HTTP status (default ``400``).
    :param code: snake_case identifier (default ``"bad_request"``).
    :param details: Optional structured payload rendered as ``details``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem(self.status_code, self.code, self.message, self.details)


class Unauthorized(APIError):
    """401 raised by the HTTP layer before any service runs."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


def problem(
    status: int, code: str, detail: str, details: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Build the problem-details body for the current request."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "code": code,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = dict(details)
    return body


def _respond(body: dict[str, Any], *, exc_info: bool = False) -> tuple[Response, int]:
    status = body["status"]
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "%s %s: %s",
        status,
        body["code"],
        body["detail"],
        extra={"status": status},
        exc_info=exc_info,
    )
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


def from_service_error(exc: ServiceError) -> APIError:
    """
    Translate a framework-agnostic service error into an :class:`APIError`.

    Unknown :class:`ServiceError` subclasses degrade to ``400 bad_request``.
    """
    for exc_type, (status, code) in SERVICE_ERROR_MAP.items():
        if isinstance(exc, exc_type):
            return APIError(str(exc), status_code=status, code=code)
    return APIError(str(exc) or "Bad request")


def init_app(app: Flask) -> None:
    """Register problem-details handlers on ``app``.

    Database and unexpected errors are logged with their traceback but never
    echoed to the client.
    """

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return _respond(err.to_problem())

    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        return _respond(from_service_error(err).to_problem())

    @app.errorhandler(MarshmallowValidationError)
    def _validation_error(err: MarshmallowValidationError):
        return _respond(
            problem(
                HTTPStatus.UNPROCESSABLE_ENTITY,
                "validation_error",
                "Validation failed",
                {"errors": err.normalized_messages()},
            )
        )

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
        code = HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return _respond(problem(status, code, detail))

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        return _respond(
            problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict"), exc_info=True
        )

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        return _respond(
            problem(
                HTTPStatus.SERVICE_UNAVAILABLE,
                "service_unavailable",
                "Service temporarily unavailable",
            ),
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        return _respond(
            problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"),
            exc_info=True,
        )
