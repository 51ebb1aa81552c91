"""Audit job polling endpoint."""
from __future__ import annotations

import re

from fastapi import APIRouter, Depends, Path, status

from app.api.models.errors import ErrorCodes, ErrorResponse, api_error
from app.api.models.responses import AuditResultModel, JobResponse
from app.api.services.job_queue import Job, job_queue
from app.api.v1.deps import rate_limit

router = APIRouter(tags=["Jobs"])

# uuid4().hex
JOB_ID_PATTERN = re.compile(r"^[a-f0-9]{32}$")


def job_response(job: Job) -> JobResponse:
    """JobResponse for ``job``; the audit payload is validated only once complete."""
    completed = job.status == "completed" and job.result is not None
    return JobResponse(
        job_id=job.id,
        status=job.status,
        url=job.url,
        created_at=job.created_at,
        completed_at=job.completed_at,
        result=AuditResultModel.model_validate(job.result) if completed else None,
        error=job.error,
        error_code=job.error_code,
    )


@router.get(
    "/jobs/{job_id}",
    response_model=JobResponse,
    dependencies=[Depends(rate_limit("query"))],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed job id"},
        404: {"model": ErrorResponse, "description": "Unknown or expired job"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Poll an audit job",
    description="""
Return the state of an audit job and, once it has completed, the full
`AuditResult`: overall score and grade, the ten category scores with their
findings, the five advanced audits, content analysis and recommendations.

A job moves `pending` → `processing` → `completed` | `failed`. Failed jobs carry
`error` and `error_code` (`URL_NOT_ACCESSIBLE` when the page could not be
fetched, `ANALYSIS_FAILED` otherwise). Jobs are kept in memory and expire after
the configured retention period.

Polling uses the query rate limit, not the audit submission limit.
""",
)
async def get_job(
    job_id: str = Path(..., description="32-character hex id returned by POST /analyze"),
) -> JobResponse:
    if not JOB_ID_PATTERN.match(job_id):
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            ErrorCodes.INVALID_REQUEST,
            "Job ids are 32 lowercase hex characters",
            {"job_id": job_id},
        )

    job = job_queue.get(job_id)
    if job is None:
        raise api_error(
            status.HTTP_404_NOT_FOUND,
            ErrorCodes.JOB_NOT_FOUND,
            f"Job not found: {job_id}",
            {"job_id": job_id},
        )
    return job_response(job)
