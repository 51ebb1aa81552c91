"""Rule-based recommendations and the merge with externally generated ones."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from src.audit.base import Category, CategoryScore, Finding
from src.errors import EnrichmentUnavailable
from src.recommend.enrichment import EnrichmentRequest, EnrichmentResponse, build_request
from src.recommend.models import (
    SOURCE_ENRICHED,
    SOURCE_FALLBACK,
    SOURCE_RULES,
    Recommendation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Template:
    title: str
    description: str
    impact: str
    implementation: str
    estimated_time: str


_S = Category.SCHEMA_MARKUP
_A = Category.AI_CRAWLERS
_E = Category.EEAT
_T = Category.TECHNICAL_SEO
_L = Category.LINK_ANALYSIS
_M = Category.META_TAGS
_C = Category.CONTENT_QUALITY
_ST = Category.STRUCTURE
_P = Category.PERFORMANCE
_CP = Category.CITATION_POTENTIAL
_CWV = Category.CORE_WEB_VITALS
_SEC = Category.SECURITY
_MOB = Category.MOBILE
_ACC = Category.ACCESSIBILITY
_INT = Category.INTERNATIONAL

# (category, signal) -> priority
PRIORITY_TABLE: dict[tuple[Category, str], str] = {
    (_T, "https"): "critical",
    (_S, "organization"): "critical",
    (_T, "indexable"): "critical",
    (_A, "robots_policy"): "high",
    (_A, "crawler_gptbot"): "high",
    (_A, "crawler_claude"): "high",
    (_A, "crawler_perplexity"): "high",
    (_A, "crawler_google_extended"): "medium",
    (_A, "crawler_anthropic_ai"): "low",
    (_A, "crawler_cohere_ai"): "low",
    (_A, "crawler_ccbot"): "low",
    (_A, "sitemap"): "medium",
    (_S, "website"): "high",
    (_S, "person"): "medium",
    (_S, "article"): "medium",
    (_S, "faq"): "medium",
    (_S, "validation"): "high",
    (_E, "author"): "high",
    (_E, "credentials"): "high",
    (_E, "citations"): "medium",
    (_E, "legal_pages"): "low",
    (_T, "viewport"): "high",
    (_T, "canonical"): "high",
    (_T, "lang"): "medium",
    (_T, "status"): "critical",
    (_M, "title"): "high",
    (_M, "description"): "medium",
    (_M, "open_graph"): "medium",
    (_ST, "single_h1"): "high",
    (_ST, "hierarchy"): "medium",
    (_C, "word_count"): "high",
    (_C, "keyword_usage"): "high",
    (_C, "readability"): "medium",
    (_C, "ai_readability"): "medium",
    (_C, "passive_voice"): "low",
    (_L, "internal_links"): "high",
    (_L, "anchor_quality"): "medium",
    (_L, "empty_anchors"): "medium",
    (_L, "external_links"): "medium",
    (_P, "html_weight"): "medium",
    (_P, "render_blocking"): "medium",
    (_CP, "factual_statements"): "high",
    (_SEC, "https"): "critical",
    (_SEC, "csp"): "medium",
    (_SEC, "referrer_policy"): "low",
    (_SEC, "privacy_policy"): "medium",
    (_SEC, "cookie_consent"): "medium",
    (_MOB, "viewport"): "high",
    (_MOB, "responsive_viewport"): "high",
    (_MOB, "flexible_images"): "medium",
    (_ACC, "lang"): "medium",
    (_ACC, "image_alt"): "high",
    (_ACC, "form_labels"): "high",
    (_ACC, "semantic_html"): "medium",
    (_INT, "lang"): "medium",
    (_INT, "hreflang"): "medium",
    (_CWV, "lcp"): "high",
    (_CWV, "fid"): "medium",
    (_CWV, "cls"): "medium",
}

# (category, signal) -> implementation cost
EFFORT_TABLE: dict[tuple[Category, str], str] = {
    (_T, "https"): "strategic",
    (_S, "organization"): "strategic",
    (_S, "website"): "quick-win",
    (_S, "person"): "quick-win",
    (_S, "faq"): "strategic",
    (_S, "validation"): "quick-win",
    (_A, "robots_policy"): "quick-win",
    (_A, "sitemap"): "quick-win",
    (_E, "credentials"): "strategic",
    (_E, "citations"): "strategic",
    (_T, "viewport"): "quick-win",
    (_T, "lang"): "quick-win",
    (_T, "canonical"): "quick-win",
    (_T, "charset"): "quick-win",
    (_T, "indexable"): "quick-win",
    (_M, "title"): "quick-win",
    (_M, "description"): "quick-win",
    (_M, "open_graph"): "quick-win",
    (_M, "twitter_card"): "quick-win",
    (_C, "word_count"): "long-term",
    (_C, "depth"): "long-term",
    (_C, "passive_voice"): "quick-win",
    (_C, "transitions"): "quick-win",
    (_L, "internal_links"): "strategic",
    (_L, "anchor_quality"): "strategic",
    (_L, "empty_anchors"): "quick-win",
    (_L, "external_links"): "quick-win",
    (_P, "html_weight"): "long-term",
    (_CP, "factual_statements"): "strategic",
    (_SEC, "https"): "strategic",
    (_SEC, "csp"): "strategic",
    (_SEC, "referrer_policy"): "quick-win",
    (_SEC, "privacy_policy"): "quick-win",
    (_SEC, "terms"): "quick-win",
    (_SEC, "cookie_consent"): "strategic",
    (_MOB, "viewport"): "quick-win",
    (_MOB, "responsive_viewport"): "quick-win",
    (_MOB, "manifest"): "quick-win",
    (_MOB, "pwa"): "long-term",
    (_ACC, "lang"): "quick-win",
    (_ACC, "image_alt"): "quick-win",
    (_ACC, "form_labels"): "quick-win",
    (_ACC, "skip_links"): "quick-win",
    (_INT, "lang"): "quick-win",
    (_CWV, "lcp"): "long-term",
    (_CWV, "cls"): "quick-win",
}

_CRAWLER_TEMPLATE = Template(
    title="Allow {agent} in robots.txt",
    description="Explicitly permit the {agent} crawler to index your content.",
    impact="Enables the AI system behind {agent} to include your site in answers and citations.",
    implementation="Add a 'User-agent: {agent}' group with 'Allow: /' to robots.txt.",
    estimated_time="5 minutes",
)
_CRAWLER_AGENTS = {
    "crawler_gptbot": "GPTBot",
    "crawler_claude": "ClaudeBot",
    "crawler_perplexity": "PerplexityBot",
    "crawler_google_extended": "Google-Extended",
    "crawler_anthropic_ai": "anthropic-ai",
    "crawler_cohere_ai": "cohere-ai",
    "crawler_ccbot": "CCBot",
}

TEMPLATES: dict[tuple[Category, str], Template] = {
    (_S, "organization"): Template(
        "Add Organization Schema",
        "Implement Schema.org Organization markup to establish your brand identity for AI systems.",
        "AI systems will recognize and cite your organization as an authoritative source.",
        "Add a JSON-LD script to the <head> with @type Organization, name, url, logo and sameAs.",
        "30 minutes",
    ),
    (_S, "website"): Template(
        "Add WebSite Schema",
        "Describe the site itself with Schema.org WebSite markup.",
        "Helps AI systems connect pages to the site entity and its search action.",
        "Add a WebSite JSON-LD object with name, url and potentialAction.",
        "15 minutes",
    ),
    (_S, "person"): Template(
        "Add Person Schema for Authors",
        "Mark up authors with Schema.org Person.",
        "Links content to identifiable experts, a key E-E-A-T signal.",
        "Add Person JSON-LD with name, jobTitle, sameAs and knowsAbout.",
        "20 minutes",
    ),
    (_S, "faq"): Template(
        "Add FAQPage Schema",
        "Structure common questions and answers with FAQPage markup.",
        "Question/answer pairs are among the most quoted formats in AI answers.",
        "Wrap existing Q&A content in FAQPage JSON-LD with Question and acceptedAnswer entries.",
        "45 minutes",
    ),
    (_S, "validation"): Template(
        "Fix Structured Data Errors",
        "Some JSON-LD blocks are invalid or missing required properties.",
        "Invalid markup is ignored by crawlers, wasting the effort spent on it.",
        "Validate each JSON-LD block and add the missing required properties.",
        "30 minutes",
    ),
    (_A, "robots_policy"): Template(
        "Publish an AI-Friendly robots.txt",
        "robots.txt is missing or blocks every AI crawler.",
        "AI crawlers that cannot fetch the page can never cite it.",
        "Serve /robots.txt with explicit groups for GPTBot, ClaudeBot and PerplexityBot that allow your content.",
        "10 minutes",
    ),
    (_A, "sitemap"): Template(
        "Declare a Sitemap",
        "No sitemap is referenced from robots.txt or the page head.",
        "Sitemaps help crawlers discover all of your content.",
        "Add a 'Sitemap: https://yoursite.com/sitemap.xml' line to robots.txt.",
        "5 minutes",
    ),
    (_E, "author"): Template(
        "Add Author Attribution",
        "Content has no visible or structured author.",
        "Attributed content is trusted and cited more often.",
        "Add an author byline and author property in Article schema.",
        "15 minutes",
    ),
    (_E, "credentials"): Template(
        "Document Expertise in Schema",
        "Add credentials, expertise areas and professional background to Person schema.",
        "Strengthens trust signals for AI evaluation.",
        "Add hasCredential, jobTitle and knowsAbout properties to Person schema.",
        "45 minutes",
    ),
    (_E, "citations"): Template(
        "Cite Authoritative Sources",
        "The page references few or no outside sources.",
        "Sourced claims are more likely to be reused by AI systems.",
        "Link 3 or more authoritative references that support key claims.",
        "30 minutes",
    ),
    (_T, "https"): Template(
        "Enable HTTPS",
        "Your site is not using HTTPS. This is a critical security and SEO issue.",
        "HTTPS is a ranking factor and non-HTTPS sites are marked as 'Not Secure'.",
        "Install a TLS certificate (e.g. Let's Encrypt) and redirect HTTP to HTTPS.",
        "1-2 hours",
    ),
    (_T, "viewport"): Template(
        "Add Viewport Meta Tag",
        "Missing viewport meta tag - critical for mobile responsiveness.",
        "Essential for mobile-friendly rendering under mobile-first indexing.",
        'Add <meta name="viewport" content="width=device-width, initial-scale=1"> to <head>.',
        "2 minutes",
    ),
    (_T, "lang"): Template(
        "Add Language Declaration",
        "Missing lang attribute on <html> element - important for AI language detection.",
        "Helps search engines and AI understand your content language.",
        'Add a lang attribute such as <html lang="en">.',
        "1 minute",
    ),
    (_T, "canonical"): Template(
        "Add Canonical URL",
        "Missing canonical link - can cause duplicate content issues.",
        "Prevents duplicate content penalties and consolidates page authority.",
        'Add <link rel="canonical" href="..."> in <head>.',
        "5 minutes",
    ),
    (_T, "indexable"): Template(
        "Remove noindex Directive",
        "The page tells crawlers not to index it.",
        "Noindexed pages cannot be referenced by search or AI systems.",
        "Remove noindex from the robots meta tag and X-Robots-Tag header.",
        "5 minutes",
    ),
    (_M, "title"): Template(
        "Optimize the Page Title",
        "The title is missing or outside the 30-60 character range.",
        "Titles are the primary summary AI systems show for a page.",
        "Write a descriptive 30-60 character <title>.",
        "10 minutes",
    ),
    (_M, "description"): Template(
        "Write a Meta Description",
        "The meta description is missing or outside the 120-160 character range.",
        "A concise description is reused as the page summary.",
        'Add <meta name="description"> with 120-160 characters.',
        "10 minutes",
    ),
    (_M, "open_graph"): Template(
        "Add Open Graph Tags",
        "Implement OG tags for better social sharing and AI preview generation.",
        "Improves content visibility when shared on platforms.",
        "Add og:title, og:description, og:image and og:url meta tags.",
        "15 minutes",
    ),
    (_ST, "single_h1"): Template(
        "Use Exactly One H1",
        "The page has no H1 or several H1 headings.",
        "A single H1 states the page topic unambiguously.",
        "Keep one H1 that names the topic and demote the rest to H2.",
        "10 minutes",
    ),
    (_C, "word_count"): Template(
        "Improve Content Depth and Quality",
        "Current content is insufficient for AI citation. Aim for 1000+ words with clear structure.",
        "Comprehensive content is far more likely to be cited by AI systems.",
        "Expand with factual data, expert quotes, clear definitions and original insights.",
        "2-4 hours per page",
    ),
    (_C, "keyword_usage"): Template(
        "Reduce Keyword Stuffing",
        "A single keyword dominates the text.",
        "Over-optimized text reads as spam to both readers and models.",
        "Rewrite repeated phrases with synonyms and keep any keyword under 3% density.",
        "1 hour",
    ),
    (_C, "ai_readability"): Template(
        "Make Content Easier for AI to Parse",
        "The text scores low on AI readability.",
        "Plain, well-structured prose is easier for models to summarize and quote.",
        "Shorten sentences, prefer active voice, explain jargon and add headings and lists.",
        "1-2 hours",
    ),
    (_C, "passive_voice"): Template(
        "Prefer Active Voice",
        "Many sentences use the passive voice.",
        "Active sentences state who does what, which makes claims easier to extract.",
        "Rewrite passive sentences so the subject performs the action.",
        "1 hour",
    ),
    (_C, "transitions"): Template(
        "Connect Ideas with Transitions",
        "Long text with few transition words reads as disconnected statements.",
        "Transitions make the reasoning between claims explicit.",
        "Link paragraphs with words such as 'however', 'for example' and 'as a result'.",
        "30 minutes",
    ),
    (_L, "internal_links"): Template(
        "Improve Internal Linking Structure",
        "Poor internal linking limits site crawlability and link equity distribution.",
        "Strong internal linking helps AI systems understand site structure.",
        "Add contextual links to related pages and create hub pages.",
        "2-3 hours",
    ),
    (_L, "empty_anchors"): Template(
        "Fix Empty Anchor Text",
        "Several links have no descriptive text - bad for accessibility and GEO.",
        "Descriptive anchor text helps AI understand link context.",
        "Add meaningful text or aria-labels to every link.",
        "30 minutes",
    ),
    (_L, "anchor_quality"): Template(
        "Improve Anchor Text Quality",
        "Many links use generic text like 'click here' or 'read more'.",
        "Descriptive anchor text helps AI understand content relationships.",
        "Replace generic anchor text with phrases that describe the destination.",
        "1-2 hours",
    ),
    (_L, "external_links"): Template(
        "Add External Citations",
        "Few or no external links - may signal lack of research and credibility.",
        "Linking to authoritative sources strengthens credibility.",
        "Add 3-5 relevant external links to authoritative sources.",
        "20 minutes",
    ),
    (_CP, "factual_statements"): Template(
        "Add Factual Data and Citations",
        "Include statistics, data points and attributed quotes to increase citation worthiness.",
        "Factual content with citations is much more likely to be referenced by AI.",
        "Add specific numbers, research references, expert quotes and clear definitions.",
        "1-2 hours",
    ),
    (_SEC, "csp"): Template(
        "Add a Content-Security-Policy",
        "No Content-Security-Policy header or meta tag restricts where scripts load from.",
        "A CSP blocks most injected-script attacks and signals a well-maintained site.",
        "Send a Content-Security-Policy header starting from default-src 'self' and widen it as needed.",
        "1-2 hours",
    ),
    (_SEC, "privacy_policy"): Template(
        "Publish a Privacy Policy",
        "No privacy policy is linked from the page.",
        "A privacy policy is a legal requirement and a basic trust signal.",
        "Write a privacy policy page and link it from the footer.",
        "1 hour",
    ),
    (_SEC, "cookie_consent"): Template(
        "Add Cookie Consent",
        "No cookie consent mechanism was detected.",
        "Consent banners are required for GDPR compliance in the EU.",
        "Add a consent banner that blocks non-essential cookies until the visitor agrees.",
        "2-3 hours",
    ),
    (_MOB, "responsive_viewport"): Template(
        "Configure a Responsive Viewport",
        "The viewport meta tag does not set width=device-width.",
        "Pages that do not scale to the device render poorly under mobile-first indexing.",
        'Use <meta name="viewport" content="width=device-width, initial-scale=1">.',
        "2 minutes",
    ),
    (_MOB, "flexible_images"): Template(
        "Serve Responsive Images",
        "Images have no srcset or <picture> alternatives.",
        "Right-sized images load faster on phones.",
        "Add srcset and sizes attributes or wrap images in <picture> with sized sources.",
        "1-2 hours",
    ),
    (_ACC, "image_alt"): Template(
        "Add Alt Text to Images",
        "Some images have no alternative text.",
        "Alt text is read by screen readers and tells AI systems what an image shows.",
        "Describe each meaningful image in its alt attribute; use alt=\"\" for decorative ones.",
        "30 minutes",
    ),
    (_ACC, "form_labels"): Template(
        "Label Form Inputs",
        "Some form inputs have no associated label.",
        "Unlabeled inputs cannot be used with a screen reader.",
        'Wrap inputs in <label> or point a <label for="..."> at each input id.',
        "20 minutes",
    ),
    (_INT, "hreflang"): Template(
        "Add hreflang Annotations",
        "Language alternates are missing or have no x-default fallback.",
        "hreflang lets search and AI systems serve the right language version.",
        'Add <link rel="alternate" hreflang="..."> for each version plus hreflang="x-default".',
        "30 minutes",
    ),
    (_CWV, "lcp"): Template(
        "Speed Up the Largest Contentful Paint",
        "The estimated LCP is above 2.5 seconds.",
        "Slow pages are crawled less and rank lower.",
        "Reduce page weight, compress the hero image and preload it.",
        "2-4 hours",
    ),
    (_CWV, "cls"): Template(
        "Reserve Space for Images",
        "Images without width and height cause layout shift.",
        "A stable layout improves the CLS Core Web Vital.",
        "Set width and height attributes on every <img>.",
        "20 minutes",
    ),
}

# Advanced audits repeat a few technical checks; they share its advice.
TEMPLATES[(_SEC, "https")] = TEMPLATES[(_T, "https")]
TEMPLATES[(_MOB, "viewport")] = TEMPLATES[(_T, "viewport")]
TEMPLATES[(_ACC, "lang")] = TEMPLATES[(_T, "lang")]
TEMPLATES[(_INT, "lang")] = TEMPLATES[(_T, "lang")]


class Enricher(Protocol):
    def enrich(self, request: EnrichmentRequest) -> EnrichmentResponse:
        ...


@dataclass
class RecommendationOutcome:
    recommendations: list[Recommendation]
    insights: list[str]
    source: str = SOURCE_RULES
    notes: list[str] = field(default_factory=list)


def sort_recommendations(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    return sorted(recommendations, key=Recommendation.sort_key)


def dedupe_recommendations(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    """Keep the first recommendation per (category, title)."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for rec in recommendations:
        key = (rec.category, rec.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(rec)
    return unique


def merge_recommendations(
    rule_based: Sequence[Recommendation],
    external: Sequence[Recommendation] = (),
) -> list[Recommendation]:
    """Combine rule-based and external recommendations.

    External entries replace rule-based ones for every category they cover;
    rule-based entries fill the remaining categories.
    """
    covered = {rec.category for rec in external}
    combined = list(external) + [rec for rec in rule_based if rec.category not in covered]
    return sort_recommendations(dedupe_recommendations(combined))


def recommendation_for(finding: Finding) -> Recommendation:
    """Deterministic recommendation for one issue finding."""
    key = (finding.category, finding.signal)
    priority = PRIORITY_TABLE.get(key, "medium" if finding.category in (_S, _A, _E, _T) else "low")
    effort = EFFORT_TABLE.get(key, "quick-win" if finding.category is _A else "strategic")

    template = TEMPLATES.get(key)
    if template is None and finding.signal in _CRAWLER_AGENTS:
        agent = _CRAWLER_AGENTS[finding.signal]
        template = Template(
            title=_CRAWLER_TEMPLATE.title.format(agent=agent),
            description=_CRAWLER_TEMPLATE.description.format(agent=agent),
            impact=_CRAWLER_TEMPLATE.impact.format(agent=agent),
            implementation=_CRAWLER_TEMPLATE.implementation.format(agent=agent),
            estimated_time=_CRAWLER_TEMPLATE.estimated_time,
        )
    if template is None:
        signal = finding.signal.replace("_", " ")
        template = Template(
            title=f"Improve {finding.category.label}: {signal}",
            description=finding.message,
            impact=f"Raises the {finding.category.label} score.",
            implementation=f"Address the {signal} issue: {finding.message}",
            estimated_time="",
        )
    return Recommendation(
        category=finding.category.value,
        priority=priority,
        effort=effort,
        title=template.title,
        description=template.description,
        impact=template.impact,
        implementation=template.implementation,
        estimated_time=template.estimated_time,
    )


def rule_recommendations(category_scores: Iterable[CategoryScore]) -> list[Recommendation]:
    """Recommendations for every issue finding.

    An advanced audit's recommendation is dropped when a weighted category
    already produced one with the same title.
    """
    recs = [recommendation_for(finding) for score in category_scores for finding in score.issues]
    weighted_titles = {rec.title for rec in recs if not Category(rec.category).is_advanced}
    recs = [rec for rec in recs if not (Category(rec.category).is_advanced and rec.title in weighted_titles)]
    return sort_recommendations(dedupe_recommendations(recs))


class RecommendationEngine:
    """Builds recommendations from findings, optionally enriched by an external source.

    Args:
        enricher: Object with ``enrich(EnrichmentRequest) -> EnrichmentResponse``;
            None keeps the engine rule-based.
    """

    def __init__(self, enricher: Enricher | None = None):
        self.enricher = enricher

    def recommend(
        self,
        category_scores: Sequence[CategoryScore],
        *,
        url: str = "",
        overall_score: float = 0.0,
        insights: Sequence[str] = (),
    ) -> RecommendationOutcome:
        rules = rule_recommendations(category_scores)
        if self.enricher is None:
            return RecommendationOutcome(rules, list(insights), SOURCE_RULES)

        request = build_request(url, overall_score, category_scores)
        try:
            response = self.enricher.enrich(request)
        except EnrichmentUnavailable as exc:
            logger.warning("Recommendation enrichment unavailable (%s): %s", exc.reason, exc)
            return RecommendationOutcome(rules, list(insights), SOURCE_FALLBACK, [str(exc)])

        merged_insights = list(insights)
        for insight in response.insights:
            if insight not in merged_insights:
                merged_insights.append(insight)
        return RecommendationOutcome(
            merge_recommendations(rules, response.to_recommendations()),
            merged_insights,
            SOURCE_ENRICHED,
        )
