"""Content analysis endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.models.errors import ErrorResponse
from app.api.models.requests import ContentRequest
from app.api.models.responses import ContentResponse
from app.api.v1.deps import rate_limit
from src.nlp.content_analyzer import analyze_content

router = APIRouter(tags=["Content"])


@router.post(
    "/content",
    response_model=ContentResponse,
    dependencies=[Depends(rate_limit("query"))],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    summary="Analyze text content",
    description="Run the heuristic NLP content analysis on submitted text or HTML.",
)
def analyze_text(body: ContentRequest) -> ContentResponse:
    """Analyze submitted content."""
    analysis = analyze_content(body.text, html=body.html)
    return ContentResponse(
        word_count=analysis.word_count,
        content_type=analysis.content_type,
        main_topic=analysis.main_topic,
        keyword_stuffing_risk=analysis.keyword_stuffing_risk,
        ai_comprehension_score=analysis.ai_comprehension_score,
        ai_readability_score=analysis.ai_readability_score,
        analysis=analysis.to_dict(),
    )
