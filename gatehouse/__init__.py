"""Gatehouse - request pipeline for a small HTTP API.

Note: Import `app` / `create_app` directly from `gatehouse.main` to avoid
circular imports.
"""

__version__ = "1.0.0"

__all__ = ["main", "api", "auth", "core", "models", "observability", "pipeline", "validation"]
