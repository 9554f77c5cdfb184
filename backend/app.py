from __future__ import annotations

import atexit

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from .config import load_settings
from .routes.config import bp as config_bp
from .routes.draw import bp as draw_bp
from .routes.health import bp as health_bp
from .routes.roster import bp as roster_bp
from .runtime import EngineRuntime


def create_app() -> Flask:
    settings = load_settings()
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.flask.secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes

    runtime = EngineRuntime(settings.draw, call_timeout=settings.call_timeout_seconds).start()
    app.extensions["luckydraw"] = runtime
    atexit.register(runtime.shutdown)

    app.register_blueprint(health_bp)
    app.register_blueprint(draw_bp)
    app.register_blueprint(roster_bp, url_prefix="/roster")
    app.register_blueprint(config_bp)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
        return jsonify({"error": "validation_error", "details": details}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description}), exc.code or 500

    @app.errorhandler(ValueError)
    def handle_value_error(exc: ValueError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(Exception)
    def handle_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify({"error": str(exc)}), 500

    return app
