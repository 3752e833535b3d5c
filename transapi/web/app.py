"""Flask application configuration, error mapping and blueprint registration."""

from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from transapi.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    TransApiError,
    ValidationError,
)
from transapi.logger import get_logger

from .routes.domains import domains_bp
from .routes.languages import languages_bp
from .routes.search import search_bp
from .routes.translations import translations_bp

logger = get_logger(__name__)

CONTEXT_KEY = "transapi"


def build_app(context) -> Flask:
    """Create and configure the Flask application around an AppContext."""
    app = Flask(__name__)

    # Keep Unicode content readable in JSON responses
    app.json.ensure_ascii = False
    app.json.sort_keys = False
    app.extensions[CONTEXT_KEY] = context

    register_blueprints(app)
    register_error_handlers(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(languages_bp, url_prefix="/languages")
    app.register_blueprint(domains_bp, url_prefix="/domains")
    app.register_blueprint(translations_bp, url_prefix="/domains")
    app.register_blueprint(search_bp, url_prefix="/search")


def register_error_handlers(app: Flask) -> None:
    """Map the error taxonomy onto HTTP status codes."""

    @app.errorhandler(NotFoundError)
    def not_found(e):
        # Never expose which lookup failed or the driver's message
        logger.debug("Not found: %s", e)
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(AlreadyExistsError)
    def already_exists(e):
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(TransApiError)
    def internal_error(e):
        logger.error("Request failed: %s", e)
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(HTTPException)
    def http_error(e):
        if e.code == 404:
            return jsonify({"error": "not found"}), 404
        return jsonify({"error": e.description}), e.code


def register_default_routes(app: Flask) -> None:
    """Register the health route."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})
