# propdesk/__init__.py
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from . import live
from .extensions import cors, db, jwt, mail, migrate

# --- Config ------------------------------------------------------------------
DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _get_allowed_origins(app: Flask) -> list[str]:
    """Allowed CORS origins: defaults, the frontend URL and a comma-separated env list."""
    extra = app.config.get("CORS_ALLOWED_ORIGINS") or ""
    extra_list = [o.strip() for o in extra.split(",") if o.strip()]
    return sorted(set(DEFAULT_ORIGINS + [app.config["FRONTEND_BASE_URL"]] + extra_list))


def _load_config(app: Flask, config_object: Optional[str | Any]) -> None:
    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS", "propdesk.config.Config")
    if isinstance(config_object, str):
        # load "package.module.ClassName"
        module, _, cls = config_object.rpartition(".")
        config_object = getattr(__import__(module, fromlist=[cls]), cls)
    app.config.from_object(config_object)

    validate = getattr(config_object, "validate", None)
    if callable(validate):
        validate()


def _configure_logging(app: Flask) -> None:
    """JSON logs to stdout."""
    level = app.config.get("LOG_LEVEL", "INFO")
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","name":"%(name)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins(app)}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["Content-Type"],
        max_age=86400,
    )


def _configure_proxy(app: Flask) -> None:
    """Respect X-Forwarded-* when running behind a proxy."""
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)
    live.init_app(app)


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None) -> Flask:
    """
    Standard Flask application factory.

    `config_object` may be:
      - a config class (e.g. ``propdesk.config.TestingConfig``)
      - dotted path to a config class (e.g. "propdesk.config.ProductionConfig")
      - None (then CONFIG_CLASS env, defaulting to propdesk.config.Config)
    """
    app = Flask(__name__)
    _load_config(app, config_object)

    _configure_logging(app)
    _configure_proxy(app)
    _configure_cors(app)
    _init_extensions(app)

    from . import models  # noqa: F401  (register tables)
    from . import security  # noqa: F401  (token blocklist loader)
    from .cli import register_cli
    from .errors import register_error_handlers
    from .routes import register_blueprints

    register_blueprints(app)
    register_error_handlers(app)
    register_cli(app)

    @app.get(app.config["API_PREFIX"] + "/health")
    def health():
        return jsonify({"status": "ok", "service": "propdesk"}), 200

    return app
