"""
Main API - external entry point.
Exposes /api/health, /api/s3/buckets, /api/parameters and /metrics, forwarding
data requests to the auxiliary service and wrapping every answer in the
versioned response envelope.
"""
import signal
import sys
import time
import uuid

import structlog
from flask import Flask, g, request
from flask_cors import CORS
from structlog.contextvars import bind_contextvars, clear_contextvars
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from main_api.auxiliary import UNKNOWN_VERSION, AuxiliaryServiceClient
from main_api.config import load_settings
from main_api.envelope import envelope_response
from main_api.logging_utils import configure_logging
from main_api.metrics import MetricsMiddleware
from main_api.routes import blueprints

logger = structlog.get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def create_app(settings=None, client=None, registry=None):
    """Application factory.

    `client` and `registry` are injectable so tests can use a fake auxiliary
    service and an isolated Prometheus registry.
    """
    if settings is None:
        settings = load_settings()
    if client is None:
        client = AuxiliaryServiceClient(settings.auxiliary_service_url)

    app = Flask(__name__)
    app.config["SERVICE_VERSION"] = settings.service_version
    app.json.sort_keys = False
    app.extensions["auxiliary"] = client

    # Registered first so its timer starts before any other hook runs.
    MetricsMiddleware(registry=registry, app=app)
    CORS(app)

    for blueprint in blueprints:
        app.register_blueprint(blueprint)

    _register_request_logging(app)
    _register_error_handlers(app)

    @app.after_request
    def add_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    return app


def _register_request_logging(app):
    @app.before_request
    def bind_request_context():
        clear_contextvars()
        g.request_started = time.perf_counter()
        bind_contextvars(
            request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex,
            path=request.path,
        )

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        duration_ms = (time.perf_counter() - started) * 1000 if started is not None else None
        logger.info(
            "request_completed",
            method=request.method,
            status=response.status_code,
            duration_ms=round(duration_ms, 2) if duration_ms is not None else None,
            remote_addr=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return response

    @app.teardown_request
    def unbind_request_context(error=None):
        clear_contextvars()


def _register_error_handlers(app):
    def unknown_versions_envelope(message, status_code):
        return envelope_response(
            False,
            message,
            app.config["SERVICE_VERSION"],
            UNKNOWN_VERSION,
            status_code=status_code,
        )

    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def endpoint_not_found(error):
        return unknown_versions_envelope("Endpoint not found", 404)

    @app.errorhandler(Exception)
    def unhandled_error(error):
        if isinstance(error, HTTPException):
            return unknown_versions_envelope(error.description, error.code or 500)
        logger.exception("unhandled_error", error=str(error))
        return unknown_versions_envelope("Internal server error", 500)


def _install_signal_handlers():
    def shutdown(signum, frame):
        logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)


def main():
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    app = create_app(settings)
    _install_signal_handlers()
    logger.info(
        "main_api_starting",
        port=settings.port,
        version=settings.service_version,
        auxiliary_service_url=settings.auxiliary_service_url,
    )
    app.run(host="0.0.0.0", port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
