"""
Prometheus instrumentation for the gateway.

MetricsMiddleware owns a CollectorRegistry, the request histogram and the
request counter. It hooks into the Flask request lifecycle so that every
request, including 404s and requests that raised, is recorded exactly once.
"""
import time

import structlog
from flask import Blueprint, Response, current_app, g, request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

logger = structlog.get_logger(__name__)

LABEL_NAMES = ("method", "route", "status_code")
DURATION_BUCKETS = (0.1, 0.3, 0.5, 0.7, 1, 3, 5, 7, 10)
APP_LABEL = "main-api"

metrics_bp = Blueprint("metrics", __name__)


class MetricsMiddleware:
    """Records per-request duration and count, labelled by method/route/status."""

    def __init__(self, registry=None, app=None):
        self.registry = registry if registry is not None else CollectorRegistry()
        # exposed as target_info{app="main-api"}, joinable onto every series
        self.registry.set_target_info({"app": APP_LABEL})

        # process memory, CPU, open fds, interpreter and GC stats
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)
        GCCollector(registry=self.registry)

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            LABEL_NAMES,
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            LABEL_NAMES,
            registry=self.registry,
        )

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions["metrics"] = self
        app.before_request(self._start_timer)
        app.after_request(self._after_request)
        app.teardown_request(self._teardown_request)
        app.register_blueprint(metrics_bp)

    def observe(self, method, route, status_code, duration):
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.http_request_duration_seconds.labels(**labels).observe(duration)
        self.http_requests_total.labels(**labels).inc()

    def exposition(self):
        return generate_latest(self.registry)

    def _start_timer(self):
        g.metrics_start = time.perf_counter()
        g.metrics_recorded = False

    def _record(self, status_code):
        if g.get("metrics_recorded", True):
            return
        g.metrics_recorded = True
        duration = time.perf_counter() - g.metrics_start
        self.observe(request.method, request_route(), status_code, duration)

    def _after_request(self, response):
        self._record(response.status_code)
        return response

    def _teardown_request(self, error=None):
        # Only reached unrecorded when the response never made it through
        # after_request, e.g. an exception raised by another after_request hook.
        if not g.get("metrics_recorded", True):
            logger.warning("metrics_recorded_on_teardown", path=request.path, error=str(error))
            self._record(500)


def request_route():
    """Matched URL rule of the current request, or the raw path if none matched."""
    if request.url_rule is not None:
        return request.url_rule.rule
    return request.path


@metrics_bp.route("/metrics")
def metrics():
    """Prometheus text exposition of the application's registry."""
    try:
        payload = current_app.extensions["metrics"].exposition()
    except Exception as error:
        logger.exception("metrics_exposition_failed")
        return Response(str(error), status=500, mimetype="text/plain")
    return Response(payload, status=200, headers={"Content-Type": CONTENT_TYPE_LATEST})
