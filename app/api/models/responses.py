"""API response models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# === Audit Models ===


class FindingModel(BaseModel):
    """Evidence behind a category score."""

    severity: Literal["strength", "issue"]
    message: str
    category: str
    signal: str
    is_estimated: bool = False


class CategoryScoreModel(BaseModel):
    """Score for one category."""

    category: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Display name")
    score: float = Field(..., ge=0, le=100)
    findings: list[FindingModel] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)


class RecommendationModel(BaseModel):
    """Prioritized remediation advice."""

    category: str
    priority: Literal["critical", "high", "medium", "low"]
    effort: Literal["quick-win", "strategic", "long-term"]
    title: str
    description: str
    impact: str = ""
    implementation: str = ""
    estimated_time: str = ""


class AuditResultModel(BaseModel):
    """Complete audit of one page."""

    url: str
    timestamp: str
    overall_score: float = Field(..., ge=0, le=100, description="Weighted score, 3 decimals")
    display_score: int = Field(..., ge=0, le=100)
    grade: Literal["A+", "A", "B", "C", "D", "F"]
    grade_label: str
    rollup: dict[str, float] = Field(default_factory=dict)
    category_scores: list[CategoryScoreModel]
    advanced_scores: list[CategoryScoreModel] = Field(default_factory=list)
    content_analysis: dict[str, Any] | None = None
    insights: list[str] = Field(default_factory=list)
    recommendations: list[RecommendationModel] = Field(default_factory=list)
    recommendation_source: Literal["rules", "enriched", "fallback"] = "rules"
    notes: list[str] = Field(default_factory=list)


class JobResponse(BaseModel):
    """Response for job status and results."""

    job_id: str = Field(..., description="Unique job identifier")
    status: Literal["pending", "processing", "completed", "failed"] = Field(
        ..., description="Job status"
    )
    url: str = Field(..., description="URL being analyzed")
    created_at: datetime = Field(..., description="When job was created")
    completed_at: datetime | None = Field(
        default=None, description="When job completed"
    )
    result: AuditResultModel | None = Field(
        default=None, description="Audit result (when completed)"
    )
    error: str | None = Field(default=None, description="Error message (when failed)")
    error_code: str | None = Field(default=None, description="Error code (when failed)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "job_id": "abc123def456789012345678901234ab",
                "status": "pending",
                "url": "https://example.com/article",
                "created_at": "2026-01-15T10:30:00Z",
                "completed_at": None,
                "result": None,
            }
        }
    }


# === Forecast Models ===


class ScoreRange(BaseModel):
    min: float
    max: float


class ForecastModel(BaseModel):
    """Projected overall score at one horizon."""

    horizon_days: int
    date: str
    predicted_score: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=100)
    margin: float
    range: ScoreRange


class ScenarioModel(BaseModel):
    """Hypothetical remediation with an estimated score delta."""

    scenario: str
    description: str
    category: str
    estimated_impact: float
    probability: int
    implementation: str
    time_to_effect: str


class InsightModel(BaseModel):
    type: Literal["milestone", "risk", "opportunity"]
    title: str
    description: str
    confidence: float
    priority: Literal["critical", "high", "medium", "low"]
    estimated_date: str | None = None


class VisibilityModel(BaseModel):
    """Heuristic per-system visibility outlook."""

    system: str
    current: int
    forecast_30d: int
    forecast_60d: int
    forecast_90d: int
    trend: Literal["increasing", "stable", "decreasing"]
    projected_citations: dict[str, int]
    is_estimated: bool = True


class CompetitiveAdvantageModel(BaseModel):
    advantage: int
    status: Literal["leading", "competitive", "behind"]
    message: str


class ForecastResponse(BaseModel):
    """Forecast report for a score history."""

    status: Literal["ok"]
    data_points: int
    trend: float = Field(..., description="Points per audit")
    current_score: float
    forecasts: list[ForecastModel]
    scenarios: list[ScenarioModel] = Field(default_factory=list)
    insights: list[InsightModel] = Field(default_factory=list)
    visibility: list[VisibilityModel] = Field(default_factory=list)
    competitive_advantage: CompetitiveAdvantageModel | None = None


# === Content Models ===


class ContentResponse(BaseModel):
    """Heuristic NLP analysis of submitted content."""

    word_count: int
    content_type: str
    main_topic: str
    keyword_stuffing_risk: Literal["none", "low", "medium", "high"]
    ai_comprehension_score: int
    ai_readability_score: int
    analysis: dict[str, Any] = Field(..., description="Full analysis")


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(
        default_factory=dict, description="Individual health check results"
    )
