"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from tasktracker.core.logger import REQUEST_ID_HEADER


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` based on application config.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. A blank or ``"*"`` origin list allows any origin but
        disables credential support. The ``Authorization`` header is always
        allowed so browsers can send bearer tokens.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        supports_credentials=not wildcard,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
