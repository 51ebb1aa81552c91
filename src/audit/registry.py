"""Scorer registry for managing available scorers."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from src.audit.advanced_audits import (
    AccessibilityAudit,
    CoreWebVitalsAudit,
    InternationalSEOAudit,
    MobileFirstAudit,
    SecurityAudit,
)
from src.audit.base import BaseScorer, Category, CategoryScore
from src.audit.content_audits import ContentQualityScorer, PerformanceScorer
from src.audit.geo_audits import AICrawlerScorer, CitationPotentialScorer, EEATScorer, SchemaMarkupScorer
from src.audit.seo_audits import LinkAnalysisScorer, MetaTagsScorer, StructureScorer, TechnicalSEOScorer
from src.config.settings import ScoringSettings

if TYPE_CHECKING:
    from src.parser.document import DocumentModel

logger = logging.getLogger(__name__)


class ScorerRegistry:
    """Registry for managing and running scorers.

    Scorers are keyed by Category; registering a second scorer for the same
    category replaces the first while keeping its position.

    Usage:
        registry = ScorerRegistry()
        registry.register(MyScorer())
        results = registry.run_all(doc)
    """

    def __init__(self):
        self._scorers: dict[Category, BaseScorer] = {}

    def __len__(self) -> int:
        return len(self._scorers)

    def __contains__(self, category: Category) -> bool:
        return category in self._scorers

    def register(self, scorer: BaseScorer) -> None:
        """Register a scorer instance.

        Args:
            scorer: Scorer instance to register
        """
        self._scorers[scorer.category] = scorer

    def unregister(self, category: Category) -> None:
        """Unregister the scorer for a category, if any."""
        self._scorers.pop(category, None)

    def get(self, category: Category) -> BaseScorer | None:
        return self._scorers.get(category)

    def list_all(self) -> list[BaseScorer]:
        """List all registered scorers in registration order."""
        return list(self._scorers.values())

    def categories(self) -> list[Category]:
        return list(self._scorers.keys())

    def run(self, category: Category, doc: DocumentModel) -> CategoryScore | None:
        """Run a specific scorer.

        Returns:
            CategoryScore or None if no scorer is registered for the category
        """
        scorer = self._scorers.get(category)
        if scorer is None:
            return None
        return scorer.run(doc)

    def run_all(self, doc: DocumentModel, max_workers: int | None = None) -> list[CategoryScore]:
        """Run all registered scorers.

        Scorers are independent and run on a thread pool; results come back
        in registration order regardless of completion order.

        Args:
            doc: Document to score
            max_workers: Thread pool size; 1 runs sequentially

        Returns:
            List of CategoryScores, one per registered scorer
        """
        scorers = self.list_all()
        if not scorers:
            return []
        if max_workers == 1:
            return [scorer.run(doc) for scorer in scorers]

        with ThreadPoolExecutor(max_workers=max_workers or len(scorers)) as executor:
            futures = [executor.submit(scorer.run, doc) for scorer in scorers]
            results = [future.result() for future in futures]
        logger.debug("Ran %d scorers for %s", len(results), doc.url or "document")
        return results


def build_default_registry(config: ScoringSettings | None = None) -> ScorerRegistry:
    """Registry with the weighted categories plus Citation Potential."""
    registry = ScorerRegistry()
    for scorer_cls in (
        SchemaMarkupScorer,
        AICrawlerScorer,
        EEATScorer,
        TechnicalSEOScorer,
        LinkAnalysisScorer,
        MetaTagsScorer,
        ContentQualityScorer,
        StructureScorer,
        PerformanceScorer,
        CitationPotentialScorer,
    ):
        registry.register(scorer_cls(config))
    return registry


def build_advanced_registry(config: ScoringSettings | None = None) -> ScorerRegistry:
    """Registry with the advanced audits (not part of the overall score)."""
    registry = ScorerRegistry()
    for scorer_cls in (
        CoreWebVitalsAudit,
        SecurityAudit,
        MobileFirstAudit,
        AccessibilityAudit,
        InternationalSEOAudit,
    ):
        registry.register(scorer_cls(config))
    return registry
