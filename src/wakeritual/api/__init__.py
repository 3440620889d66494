"""API module for the wake ritual."""

from .api import app

__all__ = ["app"]
