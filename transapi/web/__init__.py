"""Web application package for the translation API."""

from flask import Flask


def create_app(context) -> Flask:
    """Application factory for the JSON API. `context` is an AppContext."""
    from .app import build_app  # Import here to avoid circular imports

    return build_app(context)


__all__ = ["create_app"]
