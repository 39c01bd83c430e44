"""
Pipeline Package - stage composition and request-scoped context.

Components:
- chain: Pipeline, PipelineMiddleware, ErrorResponder, Stage protocol
- context: RequestContext and client identification
- state: GatehouseState, the process-scoped owner of shared maps
"""

from gatehouse.pipeline.chain import (
    CallNext,
    ErrorResponder,
    Pipeline,
    PipelineMiddleware,
    Stage,
)
from gatehouse.pipeline.context import RequestContext, client_identity

__all__ = [
    "CallNext",
    "ErrorResponder",
    "Pipeline",
    "PipelineMiddleware",
    "Stage",
    "RequestContext",
    "client_identity",
]
