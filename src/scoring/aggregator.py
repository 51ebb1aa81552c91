"""Weighted aggregation of category scores into the overall GEO score."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.audit.base import Category, CategoryScore
from src.config.settings import ScoringSettings, settings


def score_map(category_scores: Sequence[CategoryScore]) -> dict[Category, float]:
    return {s.category: s.score for s in category_scores}


def compute_overall(scores: Mapping[Category, float], config: ScoringSettings | None = None) -> float:
    """Sum of score x weight over the weight table, rounded to 3 decimals.

    Categories missing from ``scores`` contribute 0.
    """
    config = config or settings.scoring
    total = 0.0
    for category_value, weight in config.weights.items():
        total += scores.get(Category(category_value), 0.0) * weight / 100
    return round(min(100.0, max(0.0, total)), 3)


def determine_grade(score: float, config: ScoringSettings | None = None) -> tuple[str, str]:
    """Letter grade and label for an overall score."""
    config = config or settings.scoring
    for grade, threshold, label in config.grade_thresholds:
        if score >= threshold:
            return grade, label
    return config.fallback_grade


def compute_rollup(scores: Mapping[Category, float], config: ScoringSettings | None = None) -> dict[str, float]:
    """Core / technical / content sub-scores, each renormalized over its own weights."""
    config = config or settings.scoring
    rollup = {}
    for group, weights in config.rollup.items():
        weight_sum = sum(weights.values())
        value = sum(scores.get(Category(c), 0.0) * w for c, w in weights.items())
        rollup[group] = round(value / weight_sum, 3) if weight_sum else 0.0
    return rollup


def generate_insights(category_scores: Sequence[CategoryScore]) -> list[str]:
    """Plain-language observations derived from category scores and details."""
    by_category = {s.category: s for s in category_scores}

    def score(category: Category) -> float:
        return by_category[category].score if category in by_category else 0.0

    def details(category: Category) -> dict:
        return by_category[category].details if category in by_category else {}

    insights = []
    headline = sum(score(c) for c in (
        Category.SCHEMA_MARKUP,
        Category.CONTENT_QUALITY,
        Category.CITATION_POTENTIAL,
        Category.EEAT,
        Category.TECHNICAL_SEO,
    )) / 5
    if headline >= 80:
        insights.append("Your site shows strong GEO optimization. Focus on maintaining content freshness.")
    elif headline >= 60:
        insights.append("Good foundation. Prioritize schema markup and content depth for better AI visibility.")
    elif headline >= 40:
        insights.append("Moderate GEO readiness. Focus on critical improvements: schema markup and E-E-A-T signals.")
    else:
        insights.append("Significant GEO gaps detected. Start with Organization schema and comprehensive content.")

    if score(Category.TECHNICAL_SEO) < 60:
        insights.append("Technical issues detected. Address critical items like HTTPS, viewport, and canonical URLs first.")
    if score(Category.SCHEMA_MARKUP) < 50:
        insights.append("Structured data is your biggest opportunity. AI systems rely heavily on schema markup.")
    if score(Category.CITATION_POTENTIAL) < 40:
        insights.append("Low citation potential. Add factual data, statistics, and expert quotes.")
    if score(Category.CONTENT_QUALITY) < 50:
        insights.append("Content quality needs improvement. AI prefers comprehensive, well-structured content.")
    if score(Category.AI_CRAWLERS) < 60:
        insights.append("Limited AI crawler access. Ensure robots.txt explicitly allows GPTBot, Claude, and Perplexity.")

    if details(Category.CONTENT_QUALITY).get("word_count", 0) > 1500 and score(Category.CONTENT_QUALITY) > 70:
        insights.append("Excellent content depth. This positions you well for AI citations.")
    if details(Category.SCHEMA_MARKUP).get("has_graph"):
        insights.append("Advanced: Using @graph structure shows sophisticated semantic markup.")

    technical = by_category.get(Category.TECHNICAL_SEO)
    if technical is not None:
        passed = {f.signal for f in technical.strengths}
        if {"https", "viewport", "canonical"} <= passed:
            insights.append("Strong technical foundation. Core GEO elements properly implemented.")

    if score(Category.LINK_ANALYSIS) < 50:
        insights.append("Weak link structure detected. Improve internal linking and anchor text quality.")
    if details(Category.LINK_ANALYSIS).get("link_distribution") == "excellent":
        insights.append("Excellent link distribution shows well-structured content with good internal/external balance.")
    return insights
