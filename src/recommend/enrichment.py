"""Client for externally generated recommendations (OpenRouter chat completions).

The client is constructed by the caller and injected into the
RecommendationEngine. Everything the remote model returns is validated with
pydantic before use; anything unusable raises EnrichmentUnavailable so the
engine can fall back to rule-based recommendations.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Literal

import requests
from pydantic import BaseModel, Field, ValidationError

from src.audit.base import Category, CategoryScore
from src.config.settings import EnrichmentSettings, settings
from src.errors import EnrichmentUnavailable
from src.recommend.models import Recommendation

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Generative Engine Optimization strategist. Given audit scores, issues and strengths "
    "for a web page, reply with JSON only, shaped as "
    '{"recommendations": [{"category", "priority", "effort", "title", "description", "impact", '
    '"implementation", "estimated_time"}], "insights": [string]}. '
    "category is one of: " + ", ".join(c.value for c in Category) + ". "
    "priority is critical, high, medium or low; effort is quick-win, strategic or long-term."
)


class EnrichmentRequest(BaseModel):
    """Payload describing the audit to the external model."""
    url: str
    overall_score: float
    category_scores: dict[str, float]
    top_issues: list[str] = Field(default_factory=list)
    top_strengths: list[str] = Field(default_factory=list)


class ExternalRecommendation(BaseModel):
    category: Category
    priority: Literal["critical", "high", "medium", "low"]
    effort: Literal["quick-win", "strategic", "long-term"]
    title: str = Field(min_length=1)
    description: str
    impact: str = ""
    implementation: str = ""
    estimated_time: str = ""


class EnrichmentResponse(BaseModel):
    """Validated reply; an empty list means the model found nothing to add."""
    recommendations: list[ExternalRecommendation] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)

    def to_recommendations(self) -> list[Recommendation]:
        return [
            Recommendation(
                category=rec.category.value,
                priority=rec.priority,
                effort=rec.effort,
                title=rec.title,
                description=rec.description,
                impact=rec.impact,
                implementation=rec.implementation,
                estimated_time=rec.estimated_time,
            )
            for rec in self.recommendations
        ]


def build_request(
    url: str,
    overall_score: float,
    category_scores: Sequence[CategoryScore],
    config: EnrichmentSettings | None = None,
) -> EnrichmentRequest:
    config = config or settings.enrichment
    issues = [f"{s.category.label}: {f.message}" for s in category_scores for f in s.issues]
    strengths = [f"{s.category.label}: {f.message}" for s in category_scores for f in s.strengths]
    return EnrichmentRequest(
        url=url,
        overall_score=overall_score,
        category_scores={s.category.value: s.score for s in category_scores},
        top_issues=issues[:config.max_issues],
        top_strengths=strengths[:config.max_strengths],
    )


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


class OpenRouterEnricher:
    """Fetches recommendations from an OpenRouter-compatible chat completions API."""

    def __init__(self, config: EnrichmentSettings | None = None):
        self.config = config or settings.enrichment

    def enrich(self, request: EnrichmentRequest) -> EnrichmentResponse:
        """Ask the model for recommendations.

        Raises:
            EnrichmentUnavailable: missing key, transport failure, non-2xx
                status or a payload that fails validation
        """
        if not self.config.api_key:
            raise EnrichmentUnavailable("No enrichment API key configured", reason="no_api_key")

        body = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": request.model_dump_json()},
            ],
            "temperature": 0.3,
            "max_tokens": 2500,
        }
        try:
            response = requests.post(
                f"{self.config.base_url}/chat/completions",
                json=body,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                    "X-Title": "GEO Score",
                },
                timeout=self.config.timeout,
            )
        except requests.Timeout as exc:
            raise EnrichmentUnavailable(f"Enrichment request timed out: {exc}", reason="timeout") from exc
        except requests.RequestException as exc:
            raise EnrichmentUnavailable(f"Enrichment request failed: {exc}", reason="transport") from exc

        if not 200 <= response.status_code < 300:
            raise EnrichmentUnavailable(
                f"Enrichment API returned HTTP {response.status_code}", reason="http_status"
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
            payload = json.loads(_strip_code_fence(content))
            result = EnrichmentResponse.model_validate(payload)
        except (ValueError, KeyError, IndexError, TypeError, ValidationError) as exc:
            raise EnrichmentUnavailable(f"Malformed enrichment response: {exc}", reason="malformed") from exc

        logger.info("Enrichment returned %d recommendation(s)", len(result.recommendations))
        return result
