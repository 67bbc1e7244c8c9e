"""Liveness and readiness probes."""
from flask import Blueprint, Response, jsonify

from main_api.auxiliary import AuxiliaryServiceError
from main_api.envelope import build_versions, utc_timestamp
from main_api.routes import forwarding

SERVICE_NAME = "main-api"

health_bp = Blueprint("health", __name__)


@health_bp.route("/api/health", methods=["GET"], strict_slashes=False)
def liveness():
    """Process is up. Must not touch the auxiliary service."""
    return Response("OK", status=200, mimetype="text/plain")


@health_bp.route("/api/health/ready", methods=["GET"], strict_slashes=False)
def readiness():
    """Ready only when the auxiliary service answers /health."""
    client = forwarding.auxiliary_client()
    try:
        client.check_health()
    except AuxiliaryServiceError:
        payload = {
            "status": "not ready",
            "error": "Auxiliary service not available",
            "timestamp": utc_timestamp(),
            "versions": build_versions(forwarding.service_version(), client.get_version()),
            "service": SERVICE_NAME,
        }
        return jsonify(payload), 503

    payload = {
        "status": "ready",
        "timestamp": utc_timestamp(),
        "versions": build_versions(forwarding.service_version(), client.get_version()),
        "service": SERVICE_NAME,
    }
    return jsonify(payload), 200
