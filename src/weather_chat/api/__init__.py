"""HTTP API for the weather chat service."""

from .app import create_app

__all__ = ["create_app"]
