"""
Observability Package

This package provides observability infrastructure including:
- Structured JSON logging (structlog)
- Request counters and Prometheus export
- Daily append-only log sinks
"""

from gatehouse.observability.logging import configure_logging, get_logger, request_id_context
from gatehouse.observability.metrics import RequestStats, normalize_path
from gatehouse.observability.sinks import DailyLogSink

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "request_id_context",
    # Metrics
    "RequestStats",
    "normalize_path",
    # Sinks
    "DailyLogSink",
]
