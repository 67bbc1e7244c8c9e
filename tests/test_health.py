"""Liveness must not depend on the auxiliary service; readiness must."""
import requests
from urllib3.exceptions import ProtocolError


def test_liveness_is_ok_with_auxiliary_down(http, fake_session):
    response = http.get("/api/health")

    assert response.status_code == 200
    assert response.get_data(as_text=True) == "OK"
    assert response.mimetype == "text/plain"
    assert fake_session.calls == []


def test_readiness_when_auxiliary_is_healthy(http, fake_session):
    fake_session.respond("/health", body={"status": "ok"})
    fake_session.respond("/version", body={"version": "0.9.1"})

    response = http.get("/api/health/ready")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ready"
    assert payload["service"] == "main-api"
    assert payload["versions"] == {"main-api": "2.3.4", "auxiliary-service": "0.9.1"}
    assert "error" not in payload
    assert payload["timestamp"].endswith("Z")


def test_readiness_when_auxiliary_is_down(http):
    response = http.get("/api/health/ready")

    assert response.status_code == 503
    payload = response.get_json()
    assert payload["status"] == "not ready"
    assert payload["error"] == "Auxiliary service not available"
    assert payload["service"] == "main-api"
    assert payload["versions"] == {"main-api": "2.3.4", "auxiliary-service": "unknown"}


def test_readiness_on_timeout(http, fake_session):
    fake_session.fail("/health", requests.Timeout("timeout of 5000ms exceeded"))
    fake_session.respond("/version", body={"version": "0.9.1"})

    response = http.get("/api/health/ready")

    assert response.status_code == 503
    assert response.get_json()["versions"]["auxiliary-service"] == "0.9.1"
    assert fake_session.calls_to("/health")[0]["timeout"] == 5.0


def test_readiness_on_unhealthy_status(http, fake_session):
    fake_session.respond("/health", status_code=500)

    response = http.get("/api/health/ready")

    assert response.status_code == 503


def test_readiness_on_transport_error_outside_requests(http, fake_session):
    fake_session.fail("/health", ProtocolError("connection aborted"))

    response = http.get("/api/health/ready")

    assert response.status_code == 503
    assert response.get_json()["status"] == "not ready"
