"""Application factory wiring Flask extensions, security and blueprints."""

from __future__ import annotations

from flask import Flask

from tasktracker.core.config import BaseConfig, check_production_secrets, get_config
from tasktracker.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Parameters
    ----------
    config:
        Import path or object passed to :meth:`flask.Config.from_object`.
        Defaults to the class selected by ``APP_ENV``.
    instance_relative_config:
        Whether instance overrides are looked up relative to the instance
        folder.
    instance_config_filename:
        Optional python file loaded on top of ``config`` (silently skipped
        when missing).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    if app.config.get("ENV_NAME") == "production":
        check_production_secrets(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from tasktracker.core import proxy

    proxy.init_app(app)

    from tasktracker.core import extensions

    extensions.init_app(app)

    # Token codec and session store depend on config + extensions
    from tasktracker.core import security

    security.init_app(app)

    init_logging(app)

    from tasktracker.core import cors

    cors.init_app(app)

    from tasktracker.api import init_app as init_api

    init_api(app)

    from tasktracker.core import errors

    errors.init_app(app)

    from tasktracker import cli as app_cli

    app_cli.init_app(app)

    return app
