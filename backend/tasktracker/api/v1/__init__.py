"""Version 1 of the HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .categories import bp as categories_bp
from .health import bp as health_bp
from .tasks import bp as tasks_bp

API_VERSION = "v1"

# (blueprint, path below /api/v1); health answers at the version root.
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (tasks_bp, "/tasks"),
    (categories_bp, "/categories"),
]
