"""Read APIs over the persisted makes (REST + GraphQL)."""

from .app import create_app

__all__ = ["create_app"]
