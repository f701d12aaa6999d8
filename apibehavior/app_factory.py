"""Flask application factory.

Provides:
 - Configuration from environment (.env honored) with per-call overrides
 - ApiBehaviorOptions built from config, optionally adjusted by a configure hook
 - Request id + problem+json error handling driven by the policy
 - Health and diagnostics blueprints
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from .config import Config
from .diagnostics_api import bp as diagnostics_bp
from .health_api import bp as health_bp
from .logging_setup import install_support_log_handler
from .middleware import init_api_behavior
from .options import ApiBehaviorOptions


def create_app(
    config_override: dict[str, Any] | None = None,
    options: ApiBehaviorOptions | None = None,
    configure: Callable[[ApiBehaviorOptions], None] | None = None,
) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v
    app.config.update(cfg.to_flask_dict())

    # --- Policy (configuration phase; any InvalidConfigurationError aborts startup) ---
    if options is None:
        options = cfg.build_options()
    if configure is not None:
        configure(options)
    init_api_behavior(app, options)

    install_support_log_handler()

    app.register_blueprint(health_bp)
    if cfg.diagnostics_enabled:
        app.register_blueprint(diagnostics_bp)
    return app


__all__ = ["create_app"]
