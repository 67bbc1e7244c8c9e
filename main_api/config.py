"""
Runtime settings read from the process environment.

A `.env` file in the working directory (or any parent) is loaded first so
local runs behave like the container deployment.
"""
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_PORT = 3000
DEFAULT_SERVICE_VERSION = "1.0.0"
DEFAULT_AUXILIARY_SERVICE_URL = "http://localhost:3001"


class SettingsLoadError(RuntimeError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    service_version: str = DEFAULT_SERVICE_VERSION
    auxiliary_service_url: str = DEFAULT_AUXILIARY_SERVICE_URL
    log_level: str = "INFO"
    log_format: str = "console"


def load_settings(environ=None, use_dotenv=True):
    """Build Settings from environment variables.

    Unset or empty variables fall back to their defaults. Pass `environ` to
    read from a mapping other than `os.environ` (dotenv is skipped then).
    """
    if environ is None:
        if use_dotenv:
            load_dotenv(find_dotenv(".env", usecwd=True))
        environ = os.environ

    raw_port = environ.get("PORT") or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError as error:
        raise SettingsLoadError(f"PORT must be an integer, got {raw_port!r}") from error
    if not 0 < port < 65536:
        raise SettingsLoadError(f"PORT must be between 1 and 65535, got {port}")

    auxiliary_url = environ.get("AUXILIARY_SERVICE_URL") or DEFAULT_AUXILIARY_SERVICE_URL

    return Settings(
        port=port,
        service_version=environ.get("SERVICE_VERSION") or DEFAULT_SERVICE_VERSION,
        auxiliary_service_url=auxiliary_url.rstrip("/"),
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
        log_format=(environ.get("LOG_FORMAT") or "console").lower(),
    )
