"""
The uniform response envelope shared by every JSON endpoint:

    {"success": ..., "data" | "error": ..., "versions": {...}, "timestamp": ...}
"""
from datetime import datetime, timezone

from flask import jsonify

MAIN_API_KEY = "main-api"
AUXILIARY_SERVICE_KEY = "auxiliary-service"


def utc_timestamp():
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_versions(main_version, auxiliary_version):
    return {
        MAIN_API_KEY: main_version,
        AUXILIARY_SERVICE_KEY: auxiliary_version,
    }


def build_envelope(success, payload, main_version, auxiliary_version):
    """Return the envelope dict.

    `payload` is the downstream data when `success` is true and the error
    message otherwise; exactly one of "data"/"error" is set.
    """
    envelope = {"success": bool(success)}
    if success:
        envelope["data"] = payload
    else:
        envelope["error"] = str(payload)
    envelope["versions"] = build_versions(main_version, auxiliary_version)
    envelope["timestamp"] = utc_timestamp()
    return envelope


def envelope_response(success, payload, main_version, auxiliary_version, status_code=None):
    """Flask (response, status) pair for an envelope; defaults to 200 or 500."""
    if status_code is None:
        status_code = 200 if success else 500
    return jsonify(build_envelope(success, payload, main_version, auxiliary_version)), status_code
