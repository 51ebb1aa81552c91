"""Base classes for the scoring framework."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from src.config.settings import ScoringSettings, settings

if TYPE_CHECKING:
    from src.parser.document import DocumentModel


class Category(str, Enum):
    """Scoring categories.

    The first nine carry weight in the overall score, Citation Potential is
    scored but weighted 0, and the last five are advanced audits reported
    separately.
    """
    SCHEMA_MARKUP = "schema_markup"
    AI_CRAWLERS = "ai_crawlers"
    EEAT = "eeat"
    TECHNICAL_SEO = "technical_seo"
    LINK_ANALYSIS = "link_analysis"
    META_TAGS = "meta_tags"
    CONTENT_QUALITY = "content_quality"
    STRUCTURE = "structure"
    PERFORMANCE = "performance"
    CITATION_POTENTIAL = "citation_potential"
    CORE_WEB_VITALS = "core_web_vitals"
    SECURITY = "security"
    MOBILE = "mobile"
    ACCESSIBILITY = "accessibility"
    INTERNATIONAL = "international"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_advanced(self) -> bool:
        return self in ADVANCED_CATEGORIES


_LABELS = {
    Category.SCHEMA_MARKUP: "Schema Markup",
    Category.AI_CRAWLERS: "AI Crawler Access",
    Category.EEAT: "E-E-A-T",
    Category.TECHNICAL_SEO: "Technical SEO",
    Category.LINK_ANALYSIS: "Link Analysis",
    Category.META_TAGS: "Meta Tags",
    Category.CONTENT_QUALITY: "Content Quality",
    Category.STRUCTURE: "Structure",
    Category.PERFORMANCE: "Performance",
    Category.CITATION_POTENTIAL: "Citation Potential",
    Category.CORE_WEB_VITALS: "Core Web Vitals",
    Category.SECURITY: "Security",
    Category.MOBILE: "Mobile-First",
    Category.ACCESSIBILITY: "Accessibility",
    Category.INTERNATIONAL: "International SEO",
}

ADVANCED_CATEGORIES = (
    Category.CORE_WEB_VITALS,
    Category.SECURITY,
    Category.MOBILE,
    Category.ACCESSIBILITY,
    Category.INTERNATIONAL,
)

SCORED_CATEGORIES = tuple(c for c in Category if c not in ADVANCED_CATEGORIES)


class FindingSeverity(Enum):
    """Whether a finding counts for or against the page."""
    STRENGTH = "strength"
    ISSUE = "issue"


@dataclass(frozen=True)
class Finding:
    """One piece of evidence produced by a scorer.

    Attributes:
        severity: strength or issue
        message: Human-readable description
        category: Category that produced it
        signal: Stable identifier of the checklist item (used for recommendations)
        is_estimated: True for simulated measurements
    """
    severity: FindingSeverity
    message: str
    category: Category
    signal: str
    is_estimated: bool = False

    @property
    def is_issue(self) -> bool:
        return self.severity is FindingSeverity.ISSUE

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "category": self.category.value,
            "signal": self.signal,
            "is_estimated": self.is_estimated,
        }


@dataclass
class CategoryScore:
    """Score for one category; always within [0, 100], rounded to 2 decimals."""
    category: Category
    score: float
    findings: list[Finding] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.score = round(min(100.0, max(0.0, float(self.score))), 2)

    @property
    def issues(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is FindingSeverity.ISSUE]

    @property
    def strengths(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is FindingSeverity.STRENGTH]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "name": self.category.label,
            "score": self.score,
            "findings": [f.to_dict() for f in self.findings],
            "details": self.details,
        }


class Checklist:
    """Accumulates points and findings for one scorer run.

    Every ``check`` emits one finding: a strength when the signal earned its
    full allocation, an issue otherwise. An empty message emits nothing.
    """

    def __init__(self, category: Category, *, estimated: bool = False):
        self.category = category
        self.estimated = estimated
        self.points = 0.0
        self.findings: list[Finding] = []

    def check(
        self,
        signal: str,
        earned: float,
        max_points: float,
        strength: str,
        issue: str,
        *,
        passed: bool | None = None,
    ) -> bool:
        earned = max(0.0, min(float(earned), float(max_points)))
        self.points += earned
        if passed is None:
            passed = earned >= max_points - 1e-9
        self._emit(signal, strength if passed else issue, passed)
        return passed

    def deduct(self, signal: str, points: float, message: str) -> None:
        self.points -= points
        self._emit(signal, message, False)

    def note(self, signal: str, message: str, *, passed: bool) -> None:
        """Record a finding that carries no points."""
        self._emit(signal, message, passed)

    def _emit(self, signal: str, message: str, passed: bool) -> None:
        if not message:
            return
        self.findings.append(Finding(
            severity=FindingSeverity.STRENGTH if passed else FindingSeverity.ISSUE,
            message=message,
            category=self.category,
            signal=signal,
            is_estimated=self.estimated,
        ))

    def result(self, details: dict[str, Any] | None = None, *, score: float | None = None) -> CategoryScore:
        return CategoryScore(
            category=self.category,
            score=self.points if score is None else score,
            findings=list(self.findings),
            details=details or {},
        )


class BaseScorer(ABC):
    """Abstract base class for category scorers.

    Subclasses must implement:
    - category: the Category this scorer produces
    - run(): score a DocumentModel and return a CategoryScore

    Scorers are pure: no I/O, no randomness, no state kept between runs.
    """

    def __init__(self, config: ScoringSettings | None = None):
        self.config = config or settings.scoring

    @property
    @abstractmethod
    def category(self) -> Category:
        """Category produced by this scorer."""
        pass

    @property
    def name(self) -> str:
        return self.category.label

    @property
    def description(self) -> str:
        """Optional description of what this scorer checks."""
        return ""

    def checklist(self, *, estimated: bool = False) -> Checklist:
        return Checklist(self.category, estimated=estimated)

    @abstractmethod
    def run(self, doc: DocumentModel) -> CategoryScore:
        """Score the document.

        Args:
            doc: Parsed page snapshot

        Returns:
            CategoryScore with one finding per checklist signal
        """
        pass
