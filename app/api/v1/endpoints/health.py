"""Health check endpoint."""
from __future__ import annotations

from datetime import UTC, datetime
from importlib.util import find_spec

from fastapi import APIRouter

from app.api.models.responses import HealthResponse
from app.api.services.job_queue import job_queue
from src.config.settings import settings

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check API health and service status.",
)
async def health_check() -> HealthResponse:
    """Return API health status."""
    checks = {
        "nlp_textstat": find_spec("textstat") is not None,
        "schema_extractor": find_spec("extruct") is not None,
        "content_extractor": find_spec("readability") is not None,
        "job_queue": job_queue is not None,
    }
    overall_status = "healthy" if all(checks.values()) else "degraded"
    # Informational only; rule-based recommendations work without it
    checks["enrichment_configured"] = bool(settings.enrichment.api_key)

    return HealthResponse(
        status=overall_status,
        version=VERSION,
        timestamp=datetime.now(UTC),
        checks=checks,
    )
