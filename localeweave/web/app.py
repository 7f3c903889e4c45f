"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from flask import Flask, jsonify

from localeweave import __version__
from localeweave.logger import get_logger

from .routes.translation import translation_bp

logger = get_logger(__name__)


def build_app() -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    register_blueprints(app)
    register_default_routes(app)
    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translation_bp, url_prefix="/api")


def register_default_routes(app: Flask) -> None:
    """Register health check and JSON error handlers."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok", "version": __version__})

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found", "code": "not_found"}), 404

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "Internal server error", "code": "internal_error"}), 500
