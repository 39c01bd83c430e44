"""Models Package - domain models and response envelopes."""

from gatehouse.models.domain import Principal, Session
from gatehouse.models.responses import ApiResponse

__all__ = ["Principal", "Session", "ApiResponse"]
