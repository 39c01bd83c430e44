"""
Request Metrics Module

Process-lifetime request counters exposed two ways:
- RequestStats.snapshot(): JSON for the /api/stats status endpoint
- Prometheus counters on a per-instance CollectorRegistry for /metrics

Counters only ever increase; they reset only when the process restarts
(or a new RequestStats is built, e.g. per test app).

Path labels go through normalize_path() so that dynamic segments do not
explode label cardinality.
"""

import re
from datetime import datetime, timezone
from typing import Any

from prometheus_client import CollectorRegistry, Counter, generate_latest

# =============================================================================
# Path Normalization (High Cardinality Prevention)
# =============================================================================

# Order matters: more specific patterns first
_PATH_PATTERNS = [
    # UUID v4: 8-4-4-4-12 hex pattern
    (re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"), "/{id}"),
    # Generic hex ID: 8+ hex chars
    (re.compile(r"/[0-9a-fA-F]{8,}(?=/|$)"), "/{id}"),
    # Numeric ID: pure digits (e.g., /users/12345)
    (re.compile(r"/\d+(?=/|$)"), "/{id}"),
]


def normalize_path(path: str) -> str:
    """
    Normalize a URL path by replacing dynamic segments with placeholders.

    Args:
        path: The URL path to normalize (query string already stripped)

    Returns:
        Normalized path with dynamic segments replaced

    Examples:
        >>> normalize_path("/api/stats")
        '/api/stats'
        >>> normalize_path("/api/users/12345")
        '/api/users/{id}'
    """
    if path == "/":
        return path

    normalized = path
    for pattern, replacement in _PATH_PATTERNS:
        normalized = pattern.sub(replacement, normalized)

    return normalized


# =============================================================================
# Request Statistics
# =============================================================================


class RequestStats:
    """
    Aggregate request counters.

    Attributes:
        total: Requests seen since start
        by_method: Count per HTTP method
        by_path: Count per normalized path
        error_count: Unhandled errors recorded by the error logger
        start_time: When counting began (UTC)
        registry: Prometheus registry holding the exported counters
    """

    def __init__(self, namespace: str = "gatehouse") -> None:
        self.total = 0
        self.by_method: dict[str, int] = {}
        self.by_path: dict[str, int] = {}
        self.error_count = 0
        self.start_time = datetime.now(timezone.utc)

        self.registry = CollectorRegistry()
        self._requests_total = Counter(
            name=f"{namespace}_requests_total",
            documentation="Total number of HTTP requests received",
            labelnames=["method", "path"],
            registry=self.registry,
        )
        self._errors_total = Counter(
            name=f"{namespace}_errors_total",
            documentation="Total number of unhandled request errors",
            registry=self.registry,
        )

    def record_request(self, method: str, path: str) -> int:
        """
        Count one request.

        Args:
            method: HTTP method
            path: Raw URL path (normalized before counting)

        Returns:
            The request's ordinal number since start
        """
        path = normalize_path(path)
        self.total += 1
        self.by_method[method] = self.by_method.get(method, 0) + 1
        self.by_path[path] = self.by_path.get(path, 0) + 1
        self._requests_total.labels(method=method, path=path).inc()
        return self.total

    def record_error(self) -> None:
        """Count one unhandled error."""
        self.error_count += 1
        self._errors_total.inc()

    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.start_time).total_seconds()

    def snapshot(self) -> dict[str, Any]:
        """Status view: {totalRequests, byMethod, byPath, errorCount, startTime}."""
        return {
            "totalRequests": self.total,
            "byMethod": dict(self.by_method),
            "byPath": dict(self.by_path),
            "errorCount": self.error_count,
            "startTime": self.start_time.isoformat(),
        }

    def generate_metrics(self) -> str:
        """
        Generate Prometheus metrics text format.

        Returns:
            Prometheus exposition format text
        """
        return generate_latest(self.registry).decode("utf-8")
