"""API request models."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator


class AnalyzeRequest(BaseModel):
    """Request body for URL analysis."""

    url: HttpUrl = Field(
        ...,
        description="The URL to audit",
        examples=["https://example.com/article"],
    )

    @field_validator("url")
    @classmethod
    def validate_url_scheme(cls, v: HttpUrl) -> HttpUrl:
        """Ensure URL uses http or https."""
        if str(v).startswith(("http://", "https://")):
            return v
        raise ValueError("Only http and https URLs are supported")


class HistoryPoint(BaseModel):
    """One past audit."""

    timestamp: datetime
    overall_score: float = Field(..., ge=0, le=100)
    category_scores: dict[str, float] = Field(default_factory=dict)
    url: str = ""


class ForecastRequest(BaseModel):
    """Request body for score forecasting."""

    history: list[HistoryPoint] = Field(
        ...,
        max_length=1000,
        description="Past audits, in any order",
    )
    category_scores: dict[str, float] | None = Field(
        default=None,
        description="Current category scores for what-if scenarios (defaults to the latest entry)",
    )
    competitor_average: float | None = Field(
        default=None, ge=0, le=100, description="Competitor average score"
    )
    url: str | None = Field(
        default=None,
        description="Only use history entries for this URL",
    )


class ContentRequest(BaseModel):
    """Request body for NLP content analysis."""

    text: str = Field(default="", max_length=500_000)
    html: str = Field(default="", max_length=2_000_000)

    @model_validator(mode="after")
    def require_content(self) -> ContentRequest:
        """Ensure some content was sent."""
        if not self.text.strip() and not self.html.strip():
            raise ValueError("Either text or html is required")
        return self
