"""FastAPI application exposing the scene changelog editor."""

from .app import create_app

__all__ = ["create_app"]
