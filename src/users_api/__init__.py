"""REST API for managing user records."""

from .api import app, create_app

__all__ = ["app", "create_app"]
