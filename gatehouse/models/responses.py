"""
Response Models - the JSON envelope shared by every endpoint.

Shape: {success, message, messageTH?, errors?, data?}

Routes declare ``response_model=ApiResponse`` with
``response_model_exclude_none=True`` so absent optional keys are omitted.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """
    Standard response envelope.

    Attributes:
        success: Whether the request succeeded.
        message: Human-readable message.
        message_th: Thai translation (serialized as ``messageTH``).
        errors: Field-level validation errors.
        data: Payload.
    """

    success: bool = Field(default=True, description="Request outcome")
    message: str = Field(..., description="Human-readable message")
    message_th: Optional[str] = Field(
        default=None,
        serialization_alias="messageTH",
        description="Thai message",
    )
    errors: Optional[list[dict[str, Any]]] = Field(default=None, description="Validation errors")
    data: Optional[Any] = Field(default=None, description="Payload")
