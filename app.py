import os
import time
import uuid

from flask import Flask, g, jsonify, request
from pydantic import ValidationError

from api.blueprint import create_api_blueprint
from api.errors import handle_location_error, handle_validation_error
from api.schemas.api_responses import REQUEST_ID_HEADER, fail
from config import Config
import db
import models
from logging_utils import configure_app_logging, get_logger
from services.errors import LocationError


def init_db() -> None:
    """Initialize DB schema.

    Kept out of default startup path to minimize app spin-up time.
    """

    models.Base.metadata.create_all(bind=db.engine)


def create_app() -> Flask:
    app = Flask(__name__)

    # Defaults come from settings.py; environment variables override them.
    app.config.from_object(Config)

    # Configure unified app logging (UTC timestamps, per-file logs, daily rotation)
    configure_app_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger = get_logger(__name__)

    # --- slow request logging (opt-in by threshold; default 250ms) ---
    # Set to "0" to disable (or keep it low temporarily when investigating perf).
    slow_ms = float(app.config.get("SLOW_REQUEST_MS") or 0)

    @app.before_request
    def _start_timer():
        g.request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip() or uuid.uuid4().hex
        if slow_ms > 0:
            request.environ["_req_start_ns"] = time.perf_counter_ns()

    @app.after_request
    def _log_slow_requests(resp):
        if g.get("request_id"):
            resp.headers[REQUEST_ID_HEADER] = g.request_id
        if slow_ms <= 0:
            return resp

        start_ns = request.environ.get("_req_start_ns")
        if not start_ns:
            return resp

        elapsed_ms = (time.perf_counter_ns() - int(start_ns)) / 1_000_000.0
        if elapsed_ms >= slow_ms:
            # Keep it compact and stable for grepping.
            logger.warning(
                "SLOW_REQUEST ms=%.1f status=%s method=%s path=%s query=%s request_id=%s",
                elapsed_ms,
                getattr(resp, "status_code", "?"),
                request.method,
                request.path,
                request.query_string.decode("utf-8", errors="replace"),
                g.get("request_id"),
            )
        return resp

    # Register routes/blueprints (respect feature flags)
    app.register_blueprint(
        create_api_blueprint(enable_api=app.config.get("ENABLE_API", True))
    )

    # Error handlers
    app.register_error_handler(LocationError, handle_location_error)
    app.register_error_handler(ValidationError, handle_validation_error)

    @app.errorhandler(404)
    def not_found(_err):
        return jsonify(fail("resource not found", code="not_found")), 404

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return jsonify(fail("method not allowed", code="method_not_allowed")), 405

    @app.errorhandler(500)
    def server_error(_err):
        logger.exception("Unhandled server error")
        return jsonify(fail("internal server error", code="internal_error")), 500

    # Optional: initialize tables on startup only when explicitly requested.
    if os.getenv("INIT_DB_ON_STARTUP", "0") == "1":
        logger.info("INIT_DB_ON_STARTUP=1; initializing database schema")
        init_db()

    return app


# NOTE: Do not instantiate the Flask app at import time.
# Tests patch the DB engine/sessionmaker before calling create_app().
app: Flask | None = None


if __name__ == "__main__":
    app = create_app()
    get_logger(__name__).info("Starting Flask app")
    app.run(debug=True, use_reloader=False)
