"""Web job API for localeweave."""

from flask import Flask


def create_app() -> Flask:
    """Application factory for the job API."""
    from .app import build_app  # Import here to avoid circular imports

    return build_app()


__all__ = ["create_app"]
