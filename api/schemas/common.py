"""
Common schemas shared across API endpoints.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TimeWindow(str, Enum):
    """Time window for trending."""

    day = "day"
    week = "week"


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    timestamp: str = Field(..., description="ISO-8601 UTC timestamp")
