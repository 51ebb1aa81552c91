"""End-to-end audit: fetch, parse, score, aggregate and recommend."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.audit.base import CategoryScore
from src.audit.registry import ScorerRegistry, build_advanced_registry, build_default_registry
from src.config.settings import ScoringSettings, settings
from src.fetcher.html_fetcher import FetchedPage, fetch_page
from src.nlp.content_analyzer import ContentAnalysis, analyze_content
from src.parser.document import DocumentModel, document_from_page
from src.recommend.engine import RecommendationEngine
from src.recommend.models import SOURCE_RULES, Recommendation
from src.scoring.aggregator import compute_overall, compute_rollup, determine_grade, generate_insights, score_map

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditResult:
    """Complete audit of one page.

    Attributes:
        overall_score: Weighted score, 3 decimals
        display_score: overall_score rounded to an integer
        category_scores: Scored categories in registry order
        advanced_scores: Advanced audits (not weighted)
        recommendation_source: rules, enriched or fallback
    """
    url: str
    timestamp: str
    overall_score: float
    display_score: int
    grade: str
    grade_label: str
    category_scores: tuple[CategoryScore, ...]
    advanced_scores: tuple[CategoryScore, ...]
    rollup: dict[str, float]
    content_analysis: ContentAnalysis | None
    insights: tuple[str, ...]
    recommendations: tuple[Recommendation, ...]
    recommendation_source: str = SOURCE_RULES
    notes: tuple[str, ...] = field(default_factory=tuple)

    def category(self, category) -> CategoryScore | None:
        for score in self.category_scores:
            if score.category == category:
                return score
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "overall_score": self.overall_score,
            "display_score": self.display_score,
            "grade": self.grade,
            "grade_label": self.grade_label,
            "rollup": dict(self.rollup),
            "category_scores": [s.to_dict() for s in self.category_scores],
            "advanced_scores": [s.to_dict() for s in self.advanced_scores],
            "content_analysis": self.content_analysis.to_dict() if self.content_analysis else None,
            "insights": list(self.insights),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "recommendation_source": self.recommendation_source,
            "notes": list(self.notes),
        }


def audit_document(
    doc: DocumentModel,
    *,
    registry: ScorerRegistry | None = None,
    advanced_registry: ScorerRegistry | None = None,
    engine: RecommendationEngine | None = None,
    config: ScoringSettings | None = None,
    max_workers: int | None = None,
    timestamp: str | None = None,
) -> AuditResult:
    """Score an already-built document.

    Args:
        doc: Page snapshot
        registry: Weighted scorers (defaults to build_default_registry)
        advanced_registry: Advanced audits (defaults to build_advanced_registry)
        engine: Recommendation engine; its enricher, if any, is consulted
        config: Scoring settings
        max_workers: Scorer thread pool size
        timestamp: ISO timestamp to stamp on the result (defaults to now)
    """
    config = config or settings.scoring
    registry = registry or build_default_registry(config)
    advanced_registry = advanced_registry or build_advanced_registry(config)
    engine = engine or RecommendationEngine()
    workers = max_workers or config.max_workers

    category_scores = registry.run_all(doc, max_workers=workers)
    advanced_scores = advanced_registry.run_all(doc, max_workers=workers)
    content_analysis = analyze_content(doc.text_content)

    scores = score_map(category_scores)
    overall = compute_overall(scores, config)
    grade, label = determine_grade(overall, config)
    insights = generate_insights(category_scores)

    outcome = engine.recommend(
        [*category_scores, *advanced_scores], url=doc.url, overall_score=overall, insights=insights,
    )
    logger.info("Audited %s: %.3f (%s)", doc.url or "document", overall, grade)

    return AuditResult(
        url=doc.url,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        overall_score=overall,
        display_score=int(round(overall)),
        grade=grade,
        grade_label=label,
        category_scores=tuple(category_scores),
        advanced_scores=tuple(advanced_scores),
        rollup=compute_rollup(scores, config),
        content_analysis=content_analysis,
        insights=tuple(outcome.insights),
        recommendations=tuple(outcome.recommendations),
        recommendation_source=outcome.source,
        notes=tuple(outcome.notes),
    )


def audit(
    url: str,
    *,
    fetch: Callable[[str], FetchedPage] = fetch_page,
    **kwargs: Any,
) -> AuditResult:
    """Fetch a URL and audit it.

    Raises:
        FetchError: the page could not be retrieved; no partial result is produced
        ParseError: the page has no parseable markup
    """
    page = fetch(url)
    doc = document_from_page(page)
    return audit_document(doc, **kwargs)
