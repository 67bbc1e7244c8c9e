"""
HTTP client for the auxiliary service.

Every downstream call is a single GET with a bounded timeout, a fresh
X-Request-ID and a fixed User-Agent. Failures of any kind surface as
AuxiliaryServiceError; nothing is retried.
"""
import uuid

import requests
import structlog

logger = structlog.get_logger(__name__)

USER_AGENT = "main-api/1.0.0"
DEFAULT_TIMEOUT_SECONDS = 10.0
HEALTH_TIMEOUT_SECONDS = 5.0
UNKNOWN_VERSION = "unknown"


class AuxiliaryServiceError(Exception):
    """A downstream call failed (network, timeout, non-2xx or bad payload)."""

    def __init__(self, endpoint, cause):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"Auxiliary service error: {cause}")

    @property
    def message(self):
        return str(self)


def generate_request_id():
    return uuid.uuid4().hex


def _describe_http_error(error):
    """Prefer the downstream's own error text over the generic status line."""
    response = error.response
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("error", "message"):
                if isinstance(body.get(key), str) and body[key]:
                    return body[key]
    return str(error)


class AuxiliaryServiceClient:
    """Thin wrapper over a requests.Session bound to the auxiliary base URL."""

    def __init__(self, base_url, timeout=DEFAULT_TIMEOUT_SECONDS, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def url_for(self, endpoint):
        return f"{self.base_url}{endpoint}"

    def call(self, endpoint):
        """GET `endpoint` and return the decoded JSON body.

        Raises AuxiliaryServiceError on any failure.
        """
        headers = {
            "User-Agent": USER_AGENT,
            "X-Request-ID": generate_request_id(),
        }
        try:
            response = self.session.get(self.url_for(endpoint), headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as error:
            raise self._failure(endpoint, _describe_http_error(error), headers) from error
        except requests.RequestException as error:
            raise self._failure(endpoint, str(error), headers) from error
        except ValueError as error:
            # older requests releases raise a bare ValueError from .json()
            raise self._failure(endpoint, f"invalid JSON payload: {error}", headers) from error
        except Exception as error:
            # urllib3 and socket errors can escape requests unwrapped
            raise self._failure(endpoint, str(error), headers) from error

    @staticmethod
    def _failure(endpoint, cause, headers):
        failure = AuxiliaryServiceError(endpoint, cause)
        logger.warning(
            "auxiliary_call_failed",
            endpoint=endpoint,
            request_id=headers["X-Request-ID"],
            error=failure.message,
        )
        return failure

    def check_health(self, timeout=HEALTH_TIMEOUT_SECONDS):
        """GET /health and discard the body. Raises AuxiliaryServiceError if unhealthy."""
        try:
            response = self.session.get(self.url_for("/health"), timeout=timeout)
            response.raise_for_status()
        except Exception as error:
            raise AuxiliaryServiceError("/health", str(error)) from error

    def get_version(self):
        """Return the auxiliary service version, or "unknown". Never raises."""
        try:
            payload = self.call("/version")
        except AuxiliaryServiceError as error:
            logger.warning("auxiliary_version_unavailable", error=error.message)
            return UNKNOWN_VERSION

        version = payload.get("version") if isinstance(payload, dict) else None
        if not version:
            logger.warning("auxiliary_version_missing", payload_type=type(payload).__name__)
            return UNKNOWN_VERSION
        return str(version)
