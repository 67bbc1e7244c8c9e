"""main-api: versioned JSON gateway in front of the auxiliary service."""
from main_api.app import create_app

__all__ = ["create_app"]
