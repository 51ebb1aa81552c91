"""API error response models."""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error details"
    )


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "INSUFFICIENT_HISTORY",
                    "message": "Forecasting needs at least 2 history entries, got 1",
                    "details": {"data_points": 1},
                }
            }
        }
    }


class ErrorCodes:
    """Standardized error codes."""

    # 4xx Client Errors
    URL_NOT_ACCESSIBLE = "URL_NOT_ACCESSIBLE"
    INVALID_REQUEST = "INVALID_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    JOB_NOT_FOUND = "JOB_NOT_FOUND"
    INSUFFICIENT_HISTORY = "INSUFFICIENT_HISTORY"

    # 5xx Server Errors
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def api_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> HTTPException:
    """HTTPException carrying the standard error envelope."""
    return HTTPException(
        status_code=status_code,
        detail={"error": ErrorDetail(code=code, message=message, details=details).model_dump()},
        headers=headers,
    )
