"""
Favorite-Number Service Flask Application Factory.

A small reference implementation of the endpoint the load test targets,
so the suite can be pointed at a local process and exercised end to
end.  The service registers one blueprint:

  * **api_bp** -- JSON endpoints mounted at ``/api`` (``/api/health``
    and ``/api/v1/favorite``).

Key Concepts Demonstrated:
- Application factory pattern (``create_app``)
- A shared validation-error log created once per app and reused by
  every request
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask

from favorite_service.config import get_config
from favorite_service.validation import ValidationErrorLog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, **overrides: Any) -> Flask:
    """
    Create and configure the favorite-number service.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When
            *None*, the value is read from ``FLASK_ENV``, defaulting to
            ``"development"``.
        **overrides: Individual config keys applied after the class,
            e.g. ``VALIDATION_LOG_PATH`` in tests.

    Returns:
        A configured Flask application instance.
    """
    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config.update(overrides)

    logger.info("Creating favorite service app with config: %s", config_class.__name__)

    log_path = app.config.get("VALIDATION_LOG_PATH")
    app.extensions["validation_log"] = ValidationErrorLog(log_path) if log_path else None

    from favorite_service.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    return app
