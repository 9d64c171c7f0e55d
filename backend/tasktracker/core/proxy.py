"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is set.

    ``PROXYFIX_HOPS`` controls how many ``X-Forwarded-*`` hops are trusted.
    The client address matters here because the login rate limit keys on it.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)
