"""
Evernote REST — Pydantic Response Schemas
===========================================

What:  Response models for the fixed-shape endpoints and for errors.
Why:   Operation results are whatever the Evernote API returns, so only the
       error body and the health check have a declared schema; both appear
       in the generated OpenAPI docs.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every failed request.

    Example:
        {
            "error": "deserialization_error",
            "message": "Cannot parse part of the json for parameter=[withContent]. json=[\\"yes\\"]",
            "details": {"parameter": "withContent", "json": "\\"yes\\""},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response: process status plus what the dispatcher knows."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    environment: str = Field(description="Evernote environment: sandbox or production")
    operations: Dict[str, int] = Field(
        default_factory=dict,
        description="Registered operation count per store client class",
    )
    uptime_seconds: float = Field(description="Seconds since service started")
