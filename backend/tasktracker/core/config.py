"""Environment-driven settings.

``APP_ENV`` selects one of the classes below; every value can be
overridden through an environment variable (a ``.env`` file is honored).
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

load_dotenv()

DEFAULT_DURATION_SECONDS: Final[int] = 3600
_DURATION: Final = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS: Final[Mapping[str, int]] = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_TRUTHY: Final = frozenset({"1", "true", "yes", "y", "on"})
_PLACEHOLDER_PREFIX: Final = "CHANGE_ME"


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1/true/yes/y/on`` (any case) are true, the rest false."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def parse_duration(value: str | int | None, default: int = DEFAULT_DURATION_SECONDS) -> int:
    """Convert ``"15m"``, ``"7d"`` or a positive int into seconds.

    Anything else (``None``, malformed text, non-positive ints, booleans)
    yields ``default``.

    >>> parse_duration("1h")
    3600
    >>> parse_duration("bogus")
    3600
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    match = _DURATION.match(str(value).strip())
    if match is None:
        return default
    return int(match[1]) * _UNIT_SECONDS[match[2]]


class BaseConfig:
    """Settings shared by every environment.

    Token keys
        ``JWT_ACCESS_SECRET`` and ``JWT_REFRESH_SECRET`` sign the two token
        classes and must differ. Lifetimes use the ``<int><s|m|h|d>`` form.
    Sessions
        ``SESSION_STORE_BACKEND`` is ``sql`` (default), ``redis`` or
        ``memory``; ``redis`` needs ``REDIS_URL``.
    Rate limiting
        ``AUTH_LOGIN_RATE_LIMIT`` is a Flask-Limiter expression for the login
        route; the ``RATELIMIT_*`` keys are read by Flask-Limiter itself.
    """

    ENV_NAME = "base"
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "CHANGE_ME_ACCESS_SECRET_32_BYTES_MIN")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH_SECRET_32_BYTES_MIN")
    JWT_ACCESS_EXPIRES_IN = os.getenv("JWT_ACCESS_EXPIRES_IN", "1h")
    JWT_REFRESH_EXPIRES_IN = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    SESSION_STORE_BACKEND = os.getenv("SESSION_STORE_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None

    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "10 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    DEBUG = False
    TESTING = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = int(os.getenv("PROXYFIX_HOPS", "1"))


class DevelopmentConfig(BaseConfig):
    ENV_NAME = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """In-memory SQLite, fixed token keys, no rate limiting.

    ``TEST_DATABASE_URL`` points the suite at another database.
    """

    ENV_NAME = "testing"
    TESTING = True
    PROPAGATE_EXCEPTIONS = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False
    SESSION_STORE_BACKEND = "sql"
    REDIS_URL = None
    CORS_ORIGINS = "http://localhost:5173"
    JWT_ACCESS_SECRET = "test-access-secret-with-enough-entropy-0001"
    JWT_REFRESH_SECRET = "test-refresh-secret-with-enough-entropy-0002"


class ProductionConfig(BaseConfig):
    ENV_NAME = "production"
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the class named by ``APP_ENV``; unknown or unset means development."""
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "development").strip().lower(), DevelopmentConfig)


def check_production_secrets(config: Mapping[str, Any]) -> None:
    """Refuse to start production with placeholder or shared signing keys.

    :raises RuntimeError: A key still carries its ``CHANGE_ME`` default, or
        both token keys are equal.
    """
    placeholders = [
        key
        for key in ("SECRET_KEY", "JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET")
        if str(config.get(key, "")).startswith(_PLACEHOLDER_PREFIX)
    ]
    if placeholders:
        raise RuntimeError(f"Set real values for: {', '.join(placeholders)}")
    if config.get("JWT_ACCESS_SECRET") == config.get("JWT_REFRESH_SECRET"):
        raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
