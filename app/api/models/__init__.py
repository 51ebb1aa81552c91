"""API Pydantic models."""
from app.api.models.errors import ErrorCodes, ErrorDetail, ErrorResponse, api_error
from app.api.models.requests import AnalyzeRequest, ContentRequest, ForecastRequest, HistoryPoint
from app.api.models.responses import (
    AuditResultModel,
    ContentResponse,
    ForecastResponse,
    HealthResponse,
    JobResponse,
)

__all__ = [
    "AnalyzeRequest",
    "ForecastRequest",
    "HistoryPoint",
    "ContentRequest",
    "JobResponse",
    "AuditResultModel",
    "ForecastResponse",
    "ContentResponse",
    "HealthResponse",
    "ErrorResponse",
    "ErrorDetail",
    "ErrorCodes",
    "api_error",
]
