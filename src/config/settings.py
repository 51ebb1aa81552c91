"""Centralized configuration settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, fields


@dataclass
class FetcherSettings:
    """Settings for HTML fetcher."""
    request_timeout: int = 15
    robots_timeout: int = 5
    max_response_size: int = 10 * 1024 * 1024  # 10 MB
    max_redirects: int = 5
    max_retries: int = 2
    retry_backoff: float = 0.5  # seconds, doubled per attempt
    user_agent: str = "GEO-Score/1.0 (+https://github.com/geo-score/geo-score)"


@dataclass
class LoggingSettings:
    """Settings for process logging."""
    level: str = "WARNING"
    module_levels: dict[str, str] = field(default_factory=dict)
    silenced_loggers: dict[str, str] = field(default_factory=lambda: {
        "urllib3": "WARNING",
        "charset_normalizer": "WARNING",
    })


@dataclass
class NLPSettings:
    """Settings for the heuristic content analyzer."""
    min_token_length: int = 3
    primary_keyword_count: int = 10
    secondary_keyword_count: int = 10
    # Keyword stuffing thresholds (max primary keyword density, percent)
    stuffing_low_density: float = 3.0
    stuffing_high_density: float = 5.0
    # Sentence variety thresholds (standard deviation of sentence length)
    variety_low_stddev: float = 5.0
    variety_high_stddev: float = 10.0
    sentiment_threshold: float = 0.2
    # Content gaps
    gap_min_words: int = 500
    gap_min_keywords: int = 5
    max_entities_per_type: int = 5
    # AI readability (percent thresholds)
    passive_voice_high: float = 30.0
    passive_voice_low: float = 10.0
    jargon_high: float = 15.0
    transition_min_count: int = 5
    transition_min_words: int = 500
    ai_readability_good: int = 80
    ai_readability_poor: int = 50


@dataclass
class SchemaPoints:
    """Schema Markup point table (sums to 100)."""
    organization: float = 20
    website: float = 20
    person: float = 15
    article: float = 10
    faq: float = 10
    breadcrumb: float = 5
    product: float = 5
    review: float = 5
    howto: float = 5
    graph: float = 5
    # Deduction, not part of the 100
    error_penalty: float = 2
    max_error_penalty: float = 10


@dataclass
class MetaPoints:
    """Meta Tags point table (sums to 100)."""
    title: float = 20
    description: float = 20
    open_graph: float = 15
    twitter_card: float = 10
    canonical: float = 10
    viewport: float = 10
    charset: float = 5
    lang: float = 10
    title_min_length: int = 30
    title_max_length: int = 60
    description_min_length: int = 120
    description_max_length: int = 160


@dataclass
class CrawlerPoints:
    """AI-Crawler Access point table (sums to 100)."""
    robots_policy: float = 15
    sitemap: float = 10
    gptbot: float = 20
    claude: float = 15
    perplexity: float = 15
    google_extended: float = 10
    anthropic_ai: float = 5
    cohere_ai: float = 5
    ccbot: float = 5
    implicit_credit: float = 0.5  # share of points for wildcard/unspecified access


@dataclass
class EEATPoints:
    """E-E-A-T point table (sums to 100)."""
    author: float = 15
    credentials: float = 20
    about: float = 10
    contact: float = 10
    published_date: float = 10
    modified_date: float = 5
    citations: float = 10
    expert_quotes: float = 10
    trust_signals: float = 5
    legal_pages: float = 5
    min_citations: int = 3


@dataclass
class StructurePoints:
    """Structure point table (sums to 100)."""
    single_h1: float = 30
    semantic: float = 20
    hierarchy: float = 20
    nav: float = 10
    main: float = 10
    footer: float = 10


@dataclass
class PerformancePoints:
    """Performance point table (sums to 100)."""
    html_weight: float = 30
    scripts: float = 20
    stylesheets: float = 10
    lazy_images: float = 10
    image_dimensions: float = 15
    render_blocking: float = 15
    html_good_bytes: int = 200 * 1024
    html_max_bytes: int = 500 * 1024
    scripts_good: int = 5
    scripts_max: int = 10
    stylesheets_max: int = 5
    lazy_image_threshold: int = 20


@dataclass
class ContentPoints:
    """Content Quality point table (sums to 100)."""
    word_count: float = 20
    readability: float = 15
    lists: float = 8
    tables: float = 4
    paragraphs: float = 4
    images: float = 7
    video: float = 3
    internal_links: float = 4
    external_links: float = 4
    depth: float = 8
    keyword_usage: float = 10
    vocabulary: float = 8
    sentence_variety: float = 5
    word_count_tiers: tuple[tuple[int, float], ...] = (
        (2000, 1.0), (1000, 0.8), (500, 0.6), (300, 0.4),
    )
    flesch_ideal: tuple[float, float] = (30.0, 60.0)
    flesch_acceptable: tuple[float, float] = (20.0, 70.0)
    min_readability_words: int = 100


@dataclass
class TechnicalPoints:
    """Technical SEO point table (sums to 100)."""
    viewport: float = 8
    charset: float = 7
    lang: float = 8
    canonical: float = 10
    https: float = 12
    sitemap: float = 5
    hreflang: float = 10
    image_alt: float = 5
    amp: float = 5
    security_headers: float = 10
    status_ok: float = 10
    no_redirect: float = 5
    indexable: float = 5


@dataclass
class LinkPoints:
    """Link Analysis point table (sums to 100)."""
    total_links: float = 20
    internal_links: float = 20
    external_links: float = 15
    anchor_quality: float = 20
    distribution: float = 15
    nofollow: float = 10
    # Deductions, not part of the 100
    empty_anchor_penalty_high: float = 10
    empty_anchor_penalty_low: float = 5


@dataclass
class CitationPoints:
    """Citation Potential point table (caps sum to 100)."""
    factual_each: float = 5
    factual_cap: float = 25
    data_each: float = 2
    data_cap: float = 20
    quotes_each: float = 8
    quotes_cap: float = 20
    references_each: float = 7
    references_cap: float = 15
    definitions_each: float = 5
    definitions_cap: float = 10
    insights_each: float = 10
    insights_cap: float = 10


@dataclass
class WebVitalsPoints:
    """Estimated Core Web Vitals point table (sums to 100)."""
    lcp: float = 40
    fid: float = 30
    cls: float = 30
    # Points kept per metric (lcp, fid, cls) when not graded good
    needs_improvement: tuple[float, float, float] = (25, 20, 20)
    poor: tuple[float, float, float] = (5, 5, 5)


@dataclass
class SecurityPoints:
    """Security audit point table (sums to 100)."""
    https: float = 30
    csp: float = 15
    referrer_policy: float = 10
    privacy_policy: float = 15
    terms: float = 10
    cookie_consent: float = 10
    gdpr: float = 10


@dataclass
class MobilePoints:
    """Mobile-first audit point table (sums to 100)."""
    viewport: float = 25
    responsive_viewport: float = 25
    flexible_images: float = 15
    responsive_fonts: float = 15
    pwa: float = 10
    manifest: float = 10


@dataclass
class AccessibilityPoints:
    """Accessibility audit point table (sums to 100)."""
    lang: float = 10
    semantic_html: float = 20
    aria_labels: float = 15
    aria_roles: float = 10
    image_alt: float = 25
    form_labels: float = 10
    skip_links: float = 10
    wcag_levels: tuple[tuple[str, float], ...] = (("AAA", 90), ("AA", 70), ("A", 50))


@dataclass
class InternationalPoints:
    """International SEO point table (baseline included, sums to 100)."""
    baseline: float = 50
    lang: float = 15
    hreflang: float = 20
    language_switcher: float = 10
    international_schema: float = 5
    hreflang_without_default: int = 15


@dataclass
class ScoringSettings:
    """Aggregation weights, grades and per-category point tables."""
    # Category weights in percent; must sum to 100
    weights: dict[str, float] = field(default_factory=lambda: {
        "schema_markup": 16,
        "ai_crawlers": 15,
        "eeat": 15,
        "technical_seo": 13,
        "link_analysis": 12,
        "meta_tags": 9,
        "content_quality": 9,
        "structure": 6,
        "performance": 5,
        "citation_potential": 0,
    })

    # Reporting rollup, renormalized per group
    rollup: dict[str, dict[str, float]] = field(default_factory=lambda: {
        "core": {"schema_markup": 0.30, "ai_crawlers": 0.30, "eeat": 0.25},
        "technical": {
            "technical_seo": 0.40,
            "link_analysis": 0.30,
            "meta_tags": 0.20,
            "structure": 0.10,
        },
        "content": {
            "content_quality": 0.60,
            "citation_potential": 0.25,
            "performance": 0.15,
        },
    })

    # Grade thresholds, checked top-down
    grade_thresholds: tuple[tuple[str, float, str], ...] = (
        ("A+", 90, "Authority"),
        ("A", 80, "Excellent"),
        ("B", 70, "Good"),
        ("C", 60, "Fair"),
        ("D", 50, "Needs Work"),
    )
    fallback_grade: tuple[str, str] = ("F", "Poor")

    max_workers: int = 4

    schema: SchemaPoints = field(default_factory=SchemaPoints)
    meta: MetaPoints = field(default_factory=MetaPoints)
    crawlers: CrawlerPoints = field(default_factory=CrawlerPoints)
    eeat: EEATPoints = field(default_factory=EEATPoints)
    structure: StructurePoints = field(default_factory=StructurePoints)
    performance: PerformancePoints = field(default_factory=PerformancePoints)
    content: ContentPoints = field(default_factory=ContentPoints)
    technical: TechnicalPoints = field(default_factory=TechnicalPoints)
    links: LinkPoints = field(default_factory=LinkPoints)
    citation: CitationPoints = field(default_factory=CitationPoints)
    web_vitals: WebVitalsPoints = field(default_factory=WebVitalsPoints)
    security: SecurityPoints = field(default_factory=SecurityPoints)
    mobile: MobilePoints = field(default_factory=MobilePoints)
    accessibility: AccessibilityPoints = field(default_factory=AccessibilityPoints)
    international: InternationalPoints = field(default_factory=InternationalPoints)


@dataclass
class ForecastSettings:
    """Constants for score forecasting."""
    horizons: tuple[int, ...] = (30, 60, 90)
    # Trend is measured per audit; one audit period spans this many days
    trend_period_days: int = 30
    decay_base: float = 0.95
    decay_period_days: int = 30
    confidence_start: float = 95
    confidence_drop: float = 35
    confidence_span_days: int = 90
    confidence_floor: float = 60
    range_margins: dict[int, float] = field(default_factory=lambda: {30: 5, 60: 8, 90: 10})

    milestone_score: float = 90
    elite_score: float = 95
    risk_trend: float = -0.5
    plateau_trend: float = 0.1
    plateau_ceiling: float = 85
    opportunity_gain: float = 5
    days_to_score_efficiency: float = 0.7
    max_scenarios: int = 5


@dataclass
class EnrichmentSettings:
    """Settings for the external recommendation enrichment client."""
    api_key: str = ""
    base_url: str = "https://openrouter.ai/api/v1"
    model: str = "anthropic/claude-3.5-sonnet"
    timeout: int = 30
    max_issues: int = 10
    max_strengths: int = 10


@dataclass
class APISettings:
    """API-specific settings."""
    # Requests per window. Audit submissions use rate_limit; job polling,
    # forecasts and content analysis use query_rate_limit.
    rate_limit: int = 10
    query_rate_limit: int = 60
    rate_limit_window: int = 60  # seconds

    # Job queue
    job_max_workers: int = 3
    job_retention_hours: int = 24  # Clean up old jobs after this

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class Settings:
    """Main application settings container."""
    fetcher: FetcherSettings = field(default_factory=FetcherSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    nlp: NLPSettings = field(default_factory=NLPSettings)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)
    forecast: ForecastSettings = field(default_factory=ForecastSettings)
    enrichment: EnrichmentSettings = field(default_factory=EnrichmentSettings)
    api: APISettings = field(default_factory=APISettings)

    # Application settings
    debug: bool = False

    def __post_init__(self):
        """Load settings from environment variables."""
        self.debug = os.environ.get("GEO_SCORE_DEBUG", "").lower() in ("true", "1", "yes")

        # Fetcher overrides
        if timeout := os.environ.get("GEO_SCORE_REQUEST_TIMEOUT"):
            self.fetcher.request_timeout = int(timeout)
        if retries := os.environ.get("GEO_SCORE_MAX_RETRIES"):
            self.fetcher.max_retries = int(retries)

        # Logging
        if log_level := os.environ.get("GEO_SCORE_LOG_LEVEL"):
            self.logging.level = log_level.upper()
        elif self.debug:
            self.logging.level = "DEBUG"

        # Scoring
        if workers := os.environ.get("GEO_SCORE_SCORER_WORKERS"):
            self.scoring.max_workers = int(workers)

        # Recommendation enrichment
        if api_key := os.environ.get("GEO_SCORE_ENRICHMENT_API_KEY"):
            self.enrichment.api_key = api_key
        if model := os.environ.get("GEO_SCORE_ENRICHMENT_MODEL"):
            self.enrichment.model = model
        if base_url := os.environ.get("GEO_SCORE_ENRICHMENT_URL"):
            self.enrichment.base_url = base_url.rstrip("/")
        if enrich_timeout := os.environ.get("GEO_SCORE_ENRICHMENT_TIMEOUT"):
            self.enrichment.timeout = int(enrich_timeout)

        # API overrides
        if rate_limit := os.environ.get("GEO_SCORE_API_RATE_LIMIT"):
            self.api.rate_limit = int(rate_limit)
        if query_limit := os.environ.get("GEO_SCORE_API_QUERY_RATE_LIMIT"):
            self.api.query_rate_limit = int(query_limit)
        if job_workers := os.environ.get("GEO_SCORE_API_JOB_WORKERS"):
            self.api.job_max_workers = int(job_workers)
        if cors := os.environ.get("GEO_SCORE_API_CORS_ORIGINS"):
            self.api.cors_origins = [o.strip() for o in cors.split(",")]


def point_total(table: object, exclude: tuple[str, ...] = ()) -> float:
    """Sum the point fields of a point table.

    Thresholds (ints, tuples) and deductions listed in ``exclude`` are not
    counted; only float point allocations contribute.
    """
    return float(sum(
        getattr(table, f.name)
        for f in fields(table)
        if f.type == "float" and f.name not in exclude
    ))


# Global settings instance
settings = Settings()
