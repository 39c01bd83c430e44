"""
Health Router - liveness and Prometheus metrics.

Endpoints:
- GET /health: {status, version}
- GET /metrics: request counters in Prometheus text format
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from gatehouse import __version__
from gatehouse.api.deps import get_state
from gatehouse.pipeline.state import GatehouseState

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


# =============================================================================
# Router
# =============================================================================

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is up and serving requests."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics(state: GatehouseState = Depends(get_state)) -> PlainTextResponse:
    """
    Prometheus metrics endpoint.

    Returns:
        PlainTextResponse: Prometheus exposition format
    """
    return PlainTextResponse(
        content=state.stats.generate_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
