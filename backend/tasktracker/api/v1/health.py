"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.api.deps import json_response, timing
from tasktracker.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and database health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    payload = {
        "status": "ok" if db_status == "ok" else "degraded",
        "db": db_status,
        "session_store": current_app.config.get("SESSION_STORE_BACKEND", "sql"),
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if db_status == "ok" else 503)
