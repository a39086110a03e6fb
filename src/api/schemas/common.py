"""Common API response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.shared.datetime_utils import utc_now


class ErrorResponse(BaseModel):
    """Structured error response."""

    success: bool = False
    error: dict[str, Any] = Field(
        ...,
        description="Error details",
        examples=[{
            "code": "NOT_FOUND",
            "message": "Session with id 'session_123' not found",
            "details": {},
        }],
    )
    request_id: str = Field(
        ...,
        description="Unique request identifier for debugging",
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="Error timestamp",
    )
