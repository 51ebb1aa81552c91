"""Unit tests for the scorer registry."""
from __future__ import annotations

import pytest

from src.audit.base import BaseScorer, Category, CategoryScore
from src.audit.registry import ScorerRegistry, build_advanced_registry, build_default_registry


class FixedScorer(BaseScorer):
    """Scorer returning a constant score, for registry tests."""

    def __init__(self, category: Category, score: float):
        super().__init__()
        self._category = category
        self._score = score

    @property
    def category(self) -> Category:
        return self._category

    def run(self, doc) -> CategoryScore:
        return CategoryScore(category=self._category, score=self._score)


@pytest.fixture
def registry():
    reg = ScorerRegistry()
    reg.register(FixedScorer(Category.SCHEMA_MARKUP, 40))
    reg.register(FixedScorer(Category.EEAT, 60))
    return reg


class TestScorerRegistry:
    """Tests for ScorerRegistry."""

    def test_register_and_get(self, registry):
        assert len(registry) == 2
        assert Category.EEAT in registry
        assert registry.get(Category.META_TAGS) is None

    def test_register_replaces_in_place(self, registry):
        """A second scorer for a category replaces the first and keeps its slot."""
        registry.register(FixedScorer(Category.SCHEMA_MARKUP, 90))
        assert registry.categories() == [Category.SCHEMA_MARKUP, Category.EEAT]
        assert registry.run(Category.SCHEMA_MARKUP, None).score == 90

    def test_unregister(self, registry):
        registry.unregister(Category.EEAT)
        registry.unregister(Category.META_TAGS)
        assert registry.categories() == [Category.SCHEMA_MARKUP]

    def test_run_missing_category(self, registry):
        assert registry.run(Category.PERFORMANCE, None) is None

    @pytest.mark.parametrize("workers", [1, 4, None])
    def test_run_all_keeps_registration_order(self, registry, workers, make_doc):
        results = registry.run_all(make_doc("<p>x</p>"), max_workers=workers)
        assert [r.category for r in results] == [Category.SCHEMA_MARKUP, Category.EEAT]
        assert [r.score for r in results] == [40, 60]

    def test_empty_registry(self, make_doc):
        assert ScorerRegistry().run_all(make_doc("<p>x</p>")) == []


class TestBuiltinRegistries:
    def test_default_registry_covers_scored_categories(self):
        registry = build_default_registry()
        assert len(registry) == 10
        assert registry.categories()[0] is Category.SCHEMA_MARKUP
        assert registry.categories()[-1] is Category.CITATION_POTENTIAL
        assert not any(c.is_advanced for c in registry.categories())

    def test_advanced_registry(self):
        registry = build_advanced_registry()
        assert len(registry) == 5
        assert all(c.is_advanced for c in registry.categories())

    def test_scores_are_bounded(self, make_doc):
        """Every scorer returns a score in [0, 100] for an empty page."""
        doc = make_doc("<p>x</p>")
        for result in build_default_registry().run_all(doc) + build_advanced_registry().run_all(doc):
            assert 0 <= result.score <= 100
            assert result.findings
