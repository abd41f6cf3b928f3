"""
LensQuest — Flask JSON backend

Daily creative-activity logging, points and levels, course progress and
quizzes for the photography / video-production course program.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Flask, Response, jsonify

import database
from auth import login_manager
from blueprints import register_blueprints
from errors import PersistenceError, TrackerError
from extensions import compress, limiter

logger = logging.getLogger(__name__)


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    from config import config_by_name
    if test_config is not None:
        app.config.from_object(config_by_name["testing"])
        app.config.update(test_config)
    else:
        env = os.environ.get("FLASK_ENV", "development")
        cfg = config_by_name.get(env, config_by_name["development"])
        app.config.from_object(cfg)
        if hasattr(cfg, "validate"):
            cfg.validate()

    # Structured logging
    from logging_config import init_logging
    init_logging(app)

    # Register database teardown
    database.init_app(app)

    # Rate limiter (disabled in testing via RATELIMIT_ENABLED)
    limiter.init_app(app)

    login_manager.init_app(app)

    # Response compression for JSON listings
    compress.init_app(app)

    # Register all application blueprints
    register_blueprints(app)

    @app.errorhandler(TrackerError)
    def handle_tracker_error(exc: TrackerError):
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failure: %s", exc, exc_info=exc)
            return jsonify({"error": "Could not save your changes. Please try again."}), exc.status_code
        return jsonify({"error": str(exc)}), exc.status_code

    @app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def handle_rate_limited(exc):
        return jsonify({"error": "Too many requests"}), 429

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        if not app.debug and not app.testing:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5001)
