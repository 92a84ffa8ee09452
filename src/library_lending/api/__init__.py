"""REST API for the Library Lending service."""

from .app import create_app

__all__ = ["create_app"]
