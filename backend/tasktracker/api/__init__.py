"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def mount(app: Flask, prefix: str, registry: Iterable[tuple[Blueprint, str]]) -> None:
    """Register each ``(blueprint, relative_prefix)`` under ``prefix``.

    An empty relative prefix mounts the blueprint at ``prefix`` itself
    (``/api/v1`` for the health probe).
    """
    for bp, rel in registry:
        app.register_blueprint(bp, url_prefix=_join(prefix, rel))


def init_app(app: Flask) -> None:
    from tasktracker.api import v1

    mount(app, _join(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION), v1.REGISTRY)


__all__ = ["init_app", "mount"]
