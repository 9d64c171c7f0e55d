"""Build the token codec and session store from configuration."""

from __future__ import annotations

import logging
from typing import cast

from flask import Flask, current_app

from tasktracker.core.config import parse_duration
from tasktracker.core.extensions import get_redis
from tasktracker.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from tasktracker.infra.redis.redis_session_store import RedisSessionStore
from tasktracker.infra.sql.sql_session_store import SQLSessionStore
from tasktracker.services._shared.ports import InMemorySessionStore, SessionStore, TokenCodec

logger = logging.getLogger(__name__)

CODEC_KEY = "token_codec"
STORE_KEY = "session_store"


def build_token_codec(config) -> JWTTokenCodec:
    return JWTTokenCodec(
        access_secret=config["JWT_ACCESS_SECRET"],
        refresh_secret=config["JWT_REFRESH_SECRET"],
        access_ttl=parse_duration(config.get("JWT_ACCESS_EXPIRES_IN"), 3600),
        refresh_ttl=parse_duration(config.get("JWT_REFRESH_EXPIRES_IN"), 7 * 24 * 3600),
        algorithm=config.get("JWT_ALGORITHM", "HS256"),
    )


def build_session_store(app: Flask) -> SessionStore:
    """
    Pick the session store named by ``SESSION_STORE_BACKEND``.

    :raises RuntimeError: For an unknown backend name.
    """
    backend = str(app.config.get("SESSION_STORE_BACKEND", "sql")).strip().lower()
    if backend == "sql":
        return SQLSessionStore()
    if backend == "redis":
        return RedisSessionStore(get_redis(app))
    if backend == "memory":
        return InMemorySessionStore()
    raise RuntimeError(f"Unknown SESSION_STORE_BACKEND {backend!r}")


def init_app(app: Flask) -> None:
    """Attach the codec and the session store to ``app.extensions``."""
    app.extensions[CODEC_KEY] = build_token_codec(app.config)
    app.extensions[STORE_KEY] = build_session_store(app)
    logger.debug(
        "Security wired: session backend=%s", app.config.get("SESSION_STORE_BACKEND", "sql")
    )


def get_token_codec() -> TokenCodec:
    return cast(TokenCodec, current_app.extensions[CODEC_KEY])


def get_session_store() -> SessionStore:
    return cast(SessionStore, current_app.extensions[STORE_KEY])
