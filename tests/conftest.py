"""Shared fixtures: a scripted fake of the auxiliary service and an isolated app."""
import threading

import pytest
import requests
from prometheus_client import CollectorRegistry

from main_api.app import create_app
from main_api.auxiliary import AuxiliaryServiceClient
from main_api.config import Settings

AUXILIARY_URL = "http://auxiliary.test"


class FakeResponse:
    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            kind = "Client" if self.status_code < 500 else "Server"
            raise requests.HTTPError(f"{self.status_code} {kind} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; answers by endpoint path (query included)."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def respond(self, endpoint, body=None, status_code=200, invalid_json=False):
        self.routes[endpoint] = FakeResponse(status_code, body, invalid_json)

    def fail(self, endpoint, error):
        self.routes[endpoint] = error

    def calls_to(self, endpoint):
        return [call for call in self.calls if call["endpoint"] == endpoint]

    def get(self, url, headers=None, timeout=None):
        assert url.startswith(AUXILIARY_URL)
        endpoint = url[len(AUXILIARY_URL):]
        with self._lock:
            self.calls.append({"endpoint": endpoint, "headers": headers or {}, "timeout": timeout})
        outcome = self.routes.get(endpoint)
        if outcome is None:
            raise requests.ConnectionError(f"Connection refused: {url}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def settings():
    return Settings(service_version="2.3.4", auxiliary_service_url=AUXILIARY_URL)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def auxiliary(fake_session):
    return AuxiliaryServiceClient(AUXILIARY_URL, session=fake_session)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def app(settings, auxiliary, registry):
    application = create_app(settings=settings, client=auxiliary, registry=registry)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def http(app):
    return app.test_client()
