"""Audit submission endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.models.errors import ErrorResponse
from app.api.models.requests import AnalyzeRequest
from app.api.models.responses import JobResponse
from app.api.services.job_queue import job_queue
from app.api.v1.deps import rate_limit

router = APIRouter(tags=["Analysis"])


@router.post(
    "/analyze",
    response_model=JobResponse,
    dependencies=[Depends(rate_limit("audit"))],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Submit URL for GEO audit",
    description="""
Queue a GEO (Generative Engine Optimization) audit of a public http(s) page
and return its `job_id` immediately; poll `GET /api/v1/jobs/{job_id}` for the
result. Private, loopback and link-local addresses are refused when fetched.

**Weighted categories:** Schema Markup 16, AI Crawlers 15, E-E-A-T 15,
Technical SEO 13, Link Analysis 12, Meta Tags 9, Content Quality 9,
Structure 6, Performance 5. Citation Potential and the five advanced audits
are reported without weight.
""",
)
async def submit_audit(body: AnalyzeRequest) -> JobResponse:
    url = str(body.url)
    job = job_queue.get(job_queue.submit(url))
    return JobResponse(job_id=job.id, status=job.status, url=url, created_at=job.created_at)
