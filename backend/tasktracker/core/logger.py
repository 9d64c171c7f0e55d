"""JSON log lines on stdout, each tagged with the request's correlation id."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Inbound headers accepted as the correlation id, first match wins.
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` keys copied into the JSON payload; anything else is dropped.
EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "user_id",
    "task_id",
    "category_id",
    "count",
    "status",
)


def ensure_request_id() -> str:
    """Return the id of the current request, assigning one on first use.

    Outside a request context every call returns a fresh UUID.
    """
    if not has_request_context():
        return str(uuid4())
    rid = g.get("request_id")
    if rid is None:
        rid = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
            None,
        ) or str(uuid4())
        g.request_id = rid
    return rid


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Replace the root handlers with a single JSON stdout handler."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Assign the request id before dispatch and echo it on the response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
