"""Unit tests for rule-based recommendations and the merge with enrichment."""
from __future__ import annotations

from src.audit.base import Category, CategoryScore, Finding, FindingSeverity
from src.errors import EnrichmentUnavailable
from src.recommend.engine import (
    RecommendationEngine,
    dedupe_recommendations,
    merge_recommendations,
    recommendation_for,
    rule_recommendations,
    sort_recommendations,
)
from src.recommend.enrichment import EnrichmentResponse, ExternalRecommendation
from src.recommend.models import SOURCE_ENRICHED, SOURCE_FALLBACK, SOURCE_RULES, Recommendation


def _issue(category: Category, signal: str, message: str = "problem") -> Finding:
    return Finding(FindingSeverity.ISSUE, message, category, signal)


def _rec(category: str, title: str, priority: str = "medium", effort: str = "strategic") -> Recommendation:
    return Recommendation(category=category, priority=priority, effort=effort, title=title, description="")


class TestRecommendationFor:
    """Mapping one issue finding to a recommendation."""

    def test_templated_signal(self):
        rec = recommendation_for(_issue(Category.TECHNICAL_SEO, "https"))
        assert rec.title == "Enable HTTPS"
        assert rec.priority == "critical"
        assert rec.effort == "strategic"
        assert rec.category == "technical_seo"

    def test_crawler_template_names_agent(self):
        rec = recommendation_for(_issue(Category.AI_CRAWLERS, "crawler_gptbot"))
        assert rec.title == "Allow GPTBot in robots.txt"
        assert rec.priority == "high"
        assert rec.effort == "quick-win"
        assert "GPTBot" in rec.implementation

    def test_untemplated_signal_uses_finding_message(self):
        rec = recommendation_for(_issue(Category.PERFORMANCE, "stylesheets", "9 stylesheets"))
        assert rec.title == "Improve Performance: stylesheets"
        assert rec.description == "9 stylesheets"
        assert rec.priority == "low"
        assert rec.effort == "strategic"

    def test_core_categories_default_to_medium(self):
        rec = recommendation_for(_issue(Category.EEAT, "about"))
        assert rec.priority == "medium"

    def test_advanced_signal_template(self):
        rec = recommendation_for(_issue(Category.ACCESSIBILITY, "form_labels"))
        assert rec.title == "Label Form Inputs"
        assert rec.priority == "high"
        assert rec.effort == "quick-win"
        assert rec.category == "accessibility"

    def test_repeated_check_recommended_once(self):
        scores = [
            CategoryScore(Category.TECHNICAL_SEO, 50, [_issue(Category.TECHNICAL_SEO, "viewport")]),
            CategoryScore(Category.MOBILE, 50, [_issue(Category.MOBILE, "viewport")]),
        ]
        recs = rule_recommendations(scores)
        assert [(r.category, r.title) for r in recs] == [("technical_seo", "Add Viewport Meta Tag")]


class TestRuleRecommendations:
    def test_only_issues_produce_recommendations(self):
        score = CategoryScore(
            category=Category.META_TAGS,
            score=50,
            findings=[
                _issue(Category.META_TAGS, "title"),
                Finding(FindingSeverity.STRENGTH, "ok", Category.META_TAGS, "canonical"),
            ],
        )
        recs = rule_recommendations([score])
        assert [r.title for r in recs] == ["Optimize the Page Title"]

    def test_sorted_by_priority_then_effort(self):
        findings = [
            _issue(Category.META_TAGS, "description"),
            _issue(Category.TECHNICAL_SEO, "https"),
            _issue(Category.TECHNICAL_SEO, "viewport"),
            _issue(Category.SCHEMA_MARKUP, "organization"),
        ]
        recs = rule_recommendations([CategoryScore(category=Category.TECHNICAL_SEO, score=0, findings=findings)])
        assert [r.priority for r in recs] == ["critical", "critical", "high", "medium"]
        # ties on priority and effort fall back to category order
        assert recs[0].category == "schema_markup"


class TestMerge:
    """External recommendations take precedence per category."""

    def test_external_replaces_category(self):
        rules = [_rec("schema_markup", "Rule schema"), _rec("eeat", "Rule eeat")]
        external = [_rec("schema_markup", "External schema", priority="high")]
        merged = merge_recommendations(rules, external)
        assert [r.title for r in merged] == ["External schema", "Rule eeat"]

    def test_without_external(self):
        rules = [_rec("eeat", "B"), _rec("eeat", "A", priority="high")]
        assert [r.title for r in merge_recommendations(rules)] == ["A", "B"]

    def test_idempotent(self):
        rules = [_rec("schema_markup", "Rule"), _rec("links", "Links")]
        external = [_rec("schema_markup", "External")]
        once = merge_recommendations(rules, external)
        assert merge_recommendations(once, external) == once

    def test_dedupe_keeps_first(self):
        first = _rec("eeat", "Same", priority="high")
        second = _rec("eeat", "Same", priority="low")
        assert dedupe_recommendations([first, second]) == [first]

    def test_unknown_priority_sorts_last(self):
        recs = sort_recommendations([_rec("eeat", "Odd", priority="urgent"), _rec("eeat", "Low", priority="low")])
        assert [r.title for r in recs] == ["Low", "Odd"]


class _RaisingEnricher:
    def enrich(self, request):
        raise EnrichmentUnavailable("No enrichment API key configured", reason="no_api_key")


class _StaticEnricher:
    def __init__(self, response: EnrichmentResponse):
        self.response = response
        self.requests = []

    def enrich(self, request):
        self.requests.append(request)
        return self.response


class TestRecommendationEngine:
    """Source labelling and fallback behaviour."""

    SCORES = [
        CategoryScore(category=Category.SCHEMA_MARKUP, score=0, findings=[_issue(Category.SCHEMA_MARKUP, "organization")]),
        CategoryScore(category=Category.EEAT, score=0, findings=[_issue(Category.EEAT, "author")]),
    ]

    def test_rules_only(self):
        outcome = RecommendationEngine().recommend(self.SCORES, insights=["base"])
        assert outcome.source == SOURCE_RULES
        assert outcome.insights == ["base"]
        assert len(outcome.recommendations) == 2

    def test_fallback_when_enrichment_unavailable(self):
        outcome = RecommendationEngine(_RaisingEnricher()).recommend(self.SCORES)
        assert outcome.source == SOURCE_FALLBACK
        assert outcome.notes == ["No enrichment API key configured"]
        assert [r.title for r in outcome.recommendations] == ["Add Organization Schema", "Add Author Attribution"]

    def test_enriched_merge(self):
        response = EnrichmentResponse(
            recommendations=[ExternalRecommendation(
                category=Category.EEAT,
                priority="critical",
                effort="quick-win",
                title="Show author bios",
                description="Add bios",
            )],
            insights=["base", "Authors matter"],
        )
        enricher = _StaticEnricher(response)
        outcome = RecommendationEngine(enricher).recommend(
            self.SCORES, url="https://example.com/", overall_score=12.5, insights=["base"]
        )
        assert outcome.source == SOURCE_ENRICHED
        assert outcome.insights == ["base", "Authors matter"]
        assert [r.title for r in outcome.recommendations] == ["Show author bios", "Add Organization Schema"]
        request = enricher.requests[0]
        assert request.overall_score == 12.5
        assert request.category_scores == {"schema_markup": 0, "eeat": 0}

    def test_empty_enrichment_keeps_rules(self):
        outcome = RecommendationEngine(_StaticEnricher(EnrichmentResponse())).recommend(self.SCORES)
        assert outcome.source == SOURCE_ENRICHED
        assert len(outcome.recommendations) == 2
