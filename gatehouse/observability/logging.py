"""
Structured Logging Module

JSON event logging for Gatehouse. Every event carries an ISO timestamp, its
level, the emitting component and, while a request is in flight, the request
number assigned by the request counter stage.

Pattern: Configure once at startup; loggers are lazy proxies

Components:
- configure_logging(): structlog JSON pipeline plus stdlib console lines
- request_id_context(): binds ``request_id`` for the events of one request
- get_logger(): component logger factory
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars


_configured = False


@contextmanager
def request_id_context(request_id: str) -> Iterator[None]:
    """
    Bind ``request_id`` to every event logged inside the block.

    Example:
        >>> with request_id_context("42"):
        ...     logger.info("auth.login", username="admin")
    """
    with bound_contextvars(request_id=request_id):
        yield


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """
    Configure structlog and the stdlib console logger.

    Later calls are ignored unless ``force`` is set; ``create_app`` forces so
    each app picks up its own settings.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream (default: sys.stdout)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    threshold = logging.getLevelName(level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO
    output = stream or sys.stdout

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # Middleware console lines go through stdlib logging
    logging.basicConfig(level=threshold, format="%(message)s", stream=output)

    _configured = True


def get_logger(name: str, **initial_values: Any) -> Any:
    """
    Logger bound to ``component=name``.

    The proxy resolves configuration on each call, so module-level loggers
    follow later configure_logging() calls.
    """
    configure_logging()
    return structlog.get_logger(component=name, **initial_values)
