"""Routes Package - API endpoint definitions.

Routers:
- health: /health, /metrics
- auth: /api/auth/*
- protected: /api/protected/*
- admin: /api/admin/*
- demo: validation demos, diagnostics and /api/stats

Note: Import routers directly from individual modules to avoid circular imports.
Example: from gatehouse.api.routes.health import router as health_router
"""

__all__ = ["health", "auth", "protected", "admin", "demo"]
