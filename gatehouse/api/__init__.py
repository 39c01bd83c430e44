"""API Package - FastAPI routes, middleware, and dependencies.

Components:
- routes: API endpoint routers (health, auth, protected, admin, demo)
- middleware: Pipeline stages (logging, rate_limit)
- deps: Route-level stages as FastAPI dependencies

Note: Import routers directly from gatehouse.api.routes to avoid circular imports.
"""

__all__ = ["routes", "middleware", "deps"]
