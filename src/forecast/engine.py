"""
Score forecasting.

Fits a least-squares trend to past overall scores and projects it forward
with a diminishing factor, then derives what-if scenarios, insights and an
estimated AI visibility outlook.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from src.audit.base import Category, CategoryScore
from src.config.settings import ForecastSettings, settings
from src.errors import InsufficientHistoryError
from src.forecast.history import ScoreHistory

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_INSUFFICIENT = "insufficient_data"

# (system, multiplier) applied to the base visibility estimate
VISIBILITY_SYSTEMS = (
    ("ChatGPT", 1.1),
    ("Claude", 1.0),
    ("Gemini", 1.05),
    ("Perplexity", 1.15),
    ("Overall", 1.0),
)
CITATIONS_PER_TEN_POINTS = {30: 5, 60: 10, 90: 15}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ScenarioTemplate:
    key: str
    scenario: str
    description: str
    categories: tuple[Category, ...]
    cap: float
    ceiling: float
    factor: float
    probability: int
    implementation: str
    time_to_effect: str
    min_overall: float = 0.0


SCENARIOS = (
    ScenarioTemplate(
        key="schema",
        scenario="Implement comprehensive Schema.org markup",
        description="Add Organization, Person, Article, and BreadcrumbList schemas with @graph structure",
        categories=(Category.SCHEMA_MARKUP,),
        cap=15, ceiling=90, factor=0.3, probability=85,
        implementation=(
            "1. Audit current schema gaps\n2. Implement missing schema types\n"
            "3. Validate with Google Rich Results Test\n4. Monitor AI crawler responses"
        ),
        time_to_effect="2-4 weeks",
    ),
    ScenarioTemplate(
        key="eeat",
        scenario="Strengthen E-E-A-T signals",
        description="Add author credentials, update dates, citations, and expert quotes",
        categories=(Category.EEAT,),
        cap=12, ceiling=85, factor=0.25, probability=90,
        implementation=(
            "1. Add author bylines with credentials\n2. Include publication/update dates\n"
            "3. Add inline citations to authoritative sources\n4. Create About and Contact pages"
        ),
        time_to_effect="1-2 weeks",
    ),
    ScenarioTemplate(
        key="content",
        scenario="Optimize content for AI citation likelihood",
        description="Increase factual density, add data points, improve structure",
        categories=(Category.CONTENT_QUALITY, Category.CITATION_POTENTIAL),
        cap=10, ceiling=80, factor=0.2, probability=80,
        implementation=(
            "1. Add 5+ factual data points per 500 words\n2. Include statistics with sources\n"
            "3. Use clear headings and lists\n4. Add definitions for key terms"
        ),
        time_to_effect="3-6 weeks",
    ),
    ScenarioTemplate(
        key="ai_crawlers",
        scenario="Enable all major AI crawlers",
        description="Explicitly allow GPTBot, Claude-Web, PerplexityBot, and others in robots.txt",
        categories=(Category.AI_CRAWLERS,),
        cap=8, ceiling=90, factor=0.15, probability=95,
        implementation=(
            "1. Update robots.txt with AI crawler directives\n2. Submit sitemap to AI systems\n"
            "3. Monitor crawler access logs"
        ),
        time_to_effect="1 week",
    ),
    ScenarioTemplate(
        key="technical",
        scenario="Resolve technical SEO blockers",
        description="Fix HTTPS, canonical, viewport, and indexability issues that limit crawling",
        categories=(Category.TECHNICAL_SEO,),
        cap=8, ceiling=90, factor=0.2, probability=85,
        implementation=(
            "1. Serve every page over HTTPS\n2. Add canonical and viewport tags\n"
            "3. Remove accidental noindex directives\n4. Add hreflang where relevant"
        ),
        time_to_effect="1-2 weeks",
    ),
    ScenarioTemplate(
        key="knowledge_graph",
        scenario="Implement advanced knowledge graph",
        description="Connect entities with sameAs, relatedTo, and hasPart relationships",
        categories=(Category.SCHEMA_MARKUP,),
        cap=7, ceiling=95, factor=0.1, probability=70,
        implementation=(
            "1. Map entity relationships\n2. Implement @graph structure\n"
            "3. Connect to external knowledge bases (Wikidata, DBpedia)\n4. Validate graph completeness"
        ),
        time_to_effect="4-8 weeks",
        min_overall=70,
    ),
)


@dataclass(frozen=True)
class Forecast:
    horizon_days: int
    date: str
    predicted_score: float
    confidence: float
    margin: float
    range_min: float
    range_max: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "horizon_days": self.horizon_days,
            "date": self.date,
            "predicted_score": self.predicted_score,
            "confidence": self.confidence,
            "margin": self.margin,
            "range": {"min": self.range_min, "max": self.range_max},
        }


@dataclass(frozen=True)
class WhatIfScenario:
    scenario: str
    description: str
    category: str
    estimated_impact: float
    probability: int
    implementation: str
    time_to_effect: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PredictiveInsight:
    type: str
    title: str
    description: str
    confidence: float
    priority: str
    estimated_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VisibilityForecast:
    """Heuristic visibility outlook for one AI system. Not a measurement."""
    system: str
    current: int
    forecast_30d: int
    forecast_60d: int
    forecast_90d: int
    trend: str
    projected_citations: dict[str, int]
    is_estimated: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompetitiveAdvantage:
    advantage: int
    status: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ForecastReport:
    status: str
    data_points: int
    trend: float | None
    current_score: float | None
    forecasts: list[Forecast] = field(default_factory=list)
    scenarios: list[WhatIfScenario] = field(default_factory=list)
    insights: list[PredictiveInsight] = field(default_factory=list)
    visibility: list[VisibilityForecast] = field(default_factory=list)
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "data_points": self.data_points,
            "trend": self.trend,
            "current_score": self.current_score,
            "forecasts": [f.to_dict() for f in self.forecasts],
            "scenarios": [s.to_dict() for s in self.scenarios],
            "insights": [i.to_dict() for i in self.insights],
            "visibility": [v.to_dict() for v in self.visibility],
            "message": self.message,
        }


def _scores_by_category(
    category_scores: Mapping[Any, float] | Sequence[CategoryScore] | None,
) -> dict[Category, float]:
    if not category_scores:
        return {}
    if not isinstance(category_scores, Mapping):
        return {s.category: s.score for s in category_scores}
    known = {c.value for c in Category}
    # Unknown keys from older history files are ignored
    return {
        Category(key): float(value)
        for key, value in category_scores.items()
        if key in known or isinstance(key, Category)
    }


def calculate_competitive_advantage(forecast: Forecast, competitor_average: float) -> CompetitiveAdvantage:
    """Compare a forecast with a competitor average score."""
    advantage = forecast.predicted_score - competitor_average
    if advantage > 10:
        status = "leading"
        message = f"You're leading competitors by {round(advantage)} points"
    elif advantage > -5:
        status = "competitive"
        message = "You're competitive with market average"
    else:
        status = "behind"
        message = f"You're {abs(round(advantage))} points behind competitors"
    return CompetitiveAdvantage(advantage=round(advantage), status=status, message=message)


class ForecastEngine:
    """
    Projects future overall scores from a ScoreHistory.

    Attributes:
        history: Past audits; read only
        config: Forecast constants
        as_of: Reference time for forecast dates (defaults to now)
    """

    def __init__(
        self,
        history: ScoreHistory,
        config: ForecastSettings | None = None,
        *,
        as_of: datetime | None = None,
    ):
        self.history = history
        self.config = config or settings.forecast
        self.as_of = as_of or datetime.now(timezone.utc)
        self._scores = history.scores()

    @property
    def data_points(self) -> int:
        return len(self._scores)

    @property
    def current_score(self) -> float | None:
        return self._scores[-1] if self._scores else None

    def _require_history(self) -> None:
        if len(self._scores) < 2:
            raise InsufficientHistoryError(len(self._scores))

    def trend(self) -> float:
        """OLS slope of overall score against audit index, in points per audit.

        Raises:
            InsufficientHistoryError: fewer than two audits
        """
        self._require_history()
        n = len(self._scores)
        sum_x = sum(range(n))
        sum_y = sum(self._scores)
        sum_xy = sum(i * y for i, y in enumerate(self._scores))
        sum_xx = sum(i * i for i in range(n))
        return (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)

    def confidence(self, days: int) -> float:
        c = self.config
        value = c.confidence_start - (days / c.confidence_span_days) * c.confidence_drop
        return round(max(c.confidence_floor, value), 2)

    def margin(self, days: int) -> float:
        """Range half-width; linear between configured horizons, extended past the last."""
        points = [(0, 0.0)] + sorted((d, float(m)) for d, m in self.config.range_margins.items())
        for (d0, m0), (d1, m1) in zip(points, points[1:]):
            if days <= d1:
                return round(m0 + (m1 - m0) * (days - d0) / (d1 - d0), 2)
        (d0, m0), (d1, m1) = points[-2], points[-1]
        return round(m1 + (m1 - m0) * (days - d1) / (d1 - d0), 2)

    def forecast(self, days: int) -> Forecast:
        """Forecast the overall score ``days`` ahead.

        Raises:
            InsufficientHistoryError: fewer than two audits
        """
        c = self.config
        trend = self.trend()
        periods = days / c.trend_period_days
        decay = c.decay_base ** (days / c.decay_period_days)
        predicted = round(_clamp(self.current_score + trend * periods * decay), 2)
        margin = self.margin(days)
        return Forecast(
            horizon_days=days,
            date=(self.as_of + timedelta(days=days)).isoformat(),
            predicted_score=predicted,
            confidence=self.confidence(days),
            margin=margin,
            range_min=round(_clamp(predicted - margin), 2),
            range_max=round(_clamp(predicted + margin), 2),
        )

    def forecasts(self) -> list[Forecast]:
        return [self.forecast(d) for d in self.config.horizons]

    def estimate_days_to_score(self, current: float, target: float) -> int:
        """Days until ``target`` at the current trend; 0 if reached or not improving."""
        trend_per_day = self.trend() / self.config.trend_period_days
        if trend_per_day <= 0 or current >= target:
            return 0
        return round((target - current) / (trend_per_day * self.config.days_to_score_efficiency))

    def what_if_scenarios(
        self,
        category_scores: Mapping[Any, float] | Sequence[CategoryScore] | None = None,
        overall_score: float | None = None,
    ) -> list[WhatIfScenario]:
        """Remediation scenarios for the weakest categories, ranked by impact.

        Without category scores every category is assumed to sit at the
        overall score.
        """
        overall = self.current_score if overall_score is None else overall_score
        if overall is None:
            return []
        scores = _scores_by_category(category_scores)

        scenarios = []
        for template in SCENARIOS:
            if overall < template.min_overall:
                continue
            weakest = min(template.categories, key=lambda c: scores.get(c, overall))
            current = scores.get(weakest, overall)
            impact = round(min(template.cap, (template.ceiling - current) * template.factor), 2)
            if impact <= 0:
                continue
            scenarios.append(WhatIfScenario(
                scenario=template.scenario,
                description=template.description,
                category=weakest.value,
                estimated_impact=impact,
                probability=template.probability,
                implementation=template.implementation,
                time_to_effect=template.time_to_effect,
            ))
        scenarios.sort(key=lambda s: s.estimated_impact, reverse=True)
        return scenarios[:self.config.max_scenarios]

    def insights(self, forecasts: Sequence[Forecast] | None = None) -> list[PredictiveInsight]:
        """Rule-based insights over the current score, trend and forecasts."""
        c = self.config
        forecasts = list(forecasts) if forecasts is not None else self.forecasts()
        by_horizon = {f.horizon_days: f for f in forecasts}
        current = self.current_score
        trend = self.trend()
        far = by_horizon.get(max(by_horizon)) if by_horizon else None
        mid = by_horizon.get(60)

        insights = []
        if current < c.milestone_score and far is not None and far.predicted_score >= c.milestone_score:
            days = self.estimate_days_to_score(current, c.milestone_score)
            insights.append(PredictiveInsight(
                type="milestone",
                title=f"On track to reach Authority grade ({c.milestone_score:g}+)",
                description=(
                    f"At current improvement rate, you'll reach {c.milestone_score:g}+ score "
                    f"in approximately {days} days"
                ),
                confidence=far.confidence,
                priority="high",
                estimated_date=(self.as_of + timedelta(days=days)).isoformat(),
            ))

        if trend > 0 and mid is not None and mid.predicted_score > current + c.opportunity_gain:
            insights.append(PredictiveInsight(
                type="opportunity",
                title="Accelerating growth trajectory detected",
                description="Recent optimizations are compounding. Keep the current improvement cadence",
                confidence=85,
                priority="medium",
            ))

        if trend < c.risk_trend:
            insights.append(PredictiveInsight(
                type="risk",
                title="Score decline detected",
                description=(
                    "Recent changes or competitor advancements may be impacting your visibility. "
                    "Review recent Schema changes and content updates"
                ),
                confidence=75,
                priority="critical",
            ))

        if abs(trend) < c.plateau_trend and current < c.plateau_ceiling:
            insights.append(PredictiveInsight(
                type="risk",
                title="Growth plateau - strategic shift recommended",
                description=(
                    "Current optimizations show diminishing returns. "
                    "Consider What-If scenarios for breakthrough improvements"
                ),
                confidence=80,
                priority="high",
            ))

        if current >= c.elite_score:
            insights.append(PredictiveInsight(
                type="milestone",
                title="Elite GEO status achieved",
                description="Focus on content freshness and maintaining authority signals",
                confidence=95,
                priority="medium",
            ))
        return insights

    def ai_visibility(self, current: float | None = None) -> list[VisibilityForecast]:
        """Estimated visibility per AI system, derived from current and forecast scores."""
        current = self.current_score if current is None else current
        trend = self.trend()
        horizon_scores = {d: self.forecast(d).predicted_score for d in (30, 60, 90)}
        if trend > 0.5:
            label = "increasing"
        elif trend < -0.5:
            label = "decreasing"
        else:
            label = "stable"

        def visibility(score: float, multiplier: float) -> int:
            return round(_clamp(_clamp((score - 40) * 1.5) * multiplier))

        results = []
        for system, multiplier in VISIBILITY_SYSTEMS:
            projected = {d: visibility(s, multiplier) for d, s in horizon_scores.items()}
            results.append(VisibilityForecast(
                system=system,
                current=visibility(current, multiplier),
                forecast_30d=projected[30],
                forecast_60d=projected[60],
                forecast_90d=projected[90],
                trend=label,
                projected_citations={
                    f"next_{d}_days": round(projected[d] / 10 * per_ten)
                    for d, per_ten in CITATIONS_PER_TEN_POINTS.items()
                },
            ))
        return results

    def calculate_competitive_advantage(self, forecast: Forecast, competitor_average: float) -> CompetitiveAdvantage:
        return calculate_competitive_advantage(forecast, competitor_average)

    def report(
        self,
        category_scores: Mapping[Any, float] | Sequence[CategoryScore] | None = None,
    ) -> ForecastReport:
        """Full forecast report; insufficient history yields a report without numbers."""
        if category_scores is None and self.history.latest() is not None:
            category_scores = self.history.latest().category_scores or None
        try:
            trend = self.trend()
        except InsufficientHistoryError as exc:
            logger.info("Forecast skipped: %s", exc)
            return ForecastReport(
                status=STATUS_INSUFFICIENT,
                data_points=self.data_points,
                trend=None,
                current_score=self.current_score,
                scenarios=self.what_if_scenarios(category_scores),
                message=str(exc),
            )

        forecasts = self.forecasts()
        logger.debug("Trend %.3f over %d audits", trend, self.data_points)
        return ForecastReport(
            status=STATUS_OK,
            data_points=self.data_points,
            trend=round(trend, 3),
            current_score=self.current_score,
            forecasts=forecasts,
            scenarios=self.what_if_scenarios(category_scores),
            insights=self.insights(forecasts),
            visibility=self.ai_visibility(),
        )
