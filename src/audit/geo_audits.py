"""GEO-specific scorers: schema markup, AI crawler access, E-E-A-T and citation potential."""
from __future__ import annotations

import re
from typing import Any

from src.audit.base import BaseScorer, Category, CategoryScore
from src.geo.robots import AI_CRAWLERS, ALLOW, DISALLOW, crawler_access, sitemap_urls
from src.parser.document import DocumentModel, item_types

ARTICLE_TYPES = {"Article", "BlogPosting", "NewsArticle", "TechArticle", "ScholarlyArticle", "Report"}
ORGANIZATION_TYPES = {"Organization", "Corporation", "LocalBusiness", "NewsMediaOrganization", "EducationalOrganization"}
REVIEW_TYPES = {"Review", "AggregateRating"}
CREDENTIAL_PROPERTIES = ("hasCredential", "jobTitle", "knowsAbout", "award", "alumniOf")

_CREDENTIAL_TEXT = re.compile(
    r"\b(ph\.?d|m\.d\.|mba|cpa|certified|licensed|board[- ]certified|accredited|years of experience)\b",
    re.IGNORECASE,
)
_EXPERT_QUOTE = re.compile(r"\b(dr\.|professor|phd|expert)\b|according to", re.IGNORECASE)
_CITATION_MARKER = re.compile(r"\[\d+\]")

_FACTUAL = re.compile(r"\d+%|\d+\s*(?:million|billion|thousand)|in\s+\d{4}|\$\d+", re.IGNORECASE)
_DATA_POINT = re.compile(r"\d{1,3}(?:,\d{3})*(?:\.\d+)?")
_QUOTE = re.compile(r"[\"“”].*?[\"“”]")
_REFERENCE = re.compile(r"according to|research shows|study found|survey revealed|data from|source:", re.IGNORECASE)
_DEFINITION = re.compile(r"is defined as|refers to|means that|is a\s+\w+\s+that", re.IGNORECASE)
_INSIGHT = re.compile(r"we found|our analysis|we discovered|our research|we observed", re.IGNORECASE)
_AUTHORITY = {
    "Experience stated": re.compile(r"years of experience", re.IGNORECASE),
    "Certifications mentioned": re.compile(r"certified|certification", re.IGNORECASE),
    "Publications referenced": re.compile(r"published|author of", re.IGNORECASE),
    "Expertise claimed": re.compile(r"expert in|specialist in", re.IGNORECASE),
}

_CRAWLER_NAMES = {
    "gptbot": "GPTBot",
    "claude": "Claude-Web/ClaudeBot",
    "perplexity": "PerplexityBot",
    "google_extended": "Google-Extended",
    "anthropic_ai": "anthropic-ai",
    "cohere_ai": "cohere-ai",
    "ccbot": "CCBot",
}


def _nested_items(items: list[dict]) -> list[dict]:
    """Schema items plus the dict values nested one level below them (author, publisher...)."""
    nested = list(items)
    for item in items:
        for value in item.values():
            if isinstance(value, dict):
                nested.append(value)
            elif isinstance(value, list):
                nested.extend(v for v in value if isinstance(v, dict))
    return nested


class SchemaMarkupScorer(BaseScorer):
    """JSON-LD and microdata coverage of the schema.org types AI systems rely on."""

    @property
    def category(self) -> Category:
        return Category.SCHEMA_MARKUP

    @property
    def description(self) -> str:
        return "Checks Schema.org structured data that helps AI understand the entity behind the page"

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.schema
        items = doc.schema_items()
        types = doc.schema_types()
        # aggregateRating nested in Product etc. counts as review markup
        if any("aggregateRating" in item or "review" in item for item in items):
            types.add("AggregateRating")

        checks = self.checklist()
        checks.check(
            "organization", pts.organization if types & ORGANIZATION_TYPES else 0, pts.organization,
            "Organization schema found", "No Organization schema - AI cannot identify the entity behind the site",
        )
        checks.check(
            "website", pts.website if "WebSite" in types else 0, pts.website,
            "WebSite schema found", "No WebSite schema",
        )
        checks.check(
            "person", pts.person if "Person" in types else 0, pts.person,
            "Person schema found", "No Person schema for authors",
        )
        checks.check(
            "article", pts.article if types & ARTICLE_TYPES else 0, pts.article,
            "Article schema found", "No Article/BlogPosting schema",
        )
        checks.check(
            "faq", pts.faq if "FAQPage" in types else 0, pts.faq,
            "FAQPage schema found (high citation potential)", "No FAQPage schema",
        )
        checks.check(
            "breadcrumb", pts.breadcrumb if "BreadcrumbList" in types else 0, pts.breadcrumb,
            "BreadcrumbList schema found", "No BreadcrumbList schema",
        )
        checks.check(
            "product", pts.product if "Product" in types else 0, pts.product,
            "Product schema found", "No Product schema",
        )
        checks.check(
            "review", pts.review if types & REVIEW_TYPES else 0, pts.review,
            "Review/AggregateRating schema found", "No Review or AggregateRating schema",
        )
        checks.check(
            "howto", pts.howto if "HowTo" in types else 0, pts.howto,
            "HowTo schema found (high citation potential)", "No HowTo schema",
        )
        has_graph = any(block.has_graph for block in doc.structured_data_blocks)
        checks.check(
            "graph", pts.graph if has_graph else 0, pts.graph,
            "Connected @graph structure used", "No @graph structure linking schema entities",
        )

        errors = self._validation_errors(doc, items)
        if errors:
            penalty = min(len(errors) * pts.error_penalty, pts.max_error_penalty)
            checks.deduct("validation", penalty, f"{len(errors)} schema validation error(s): {'; '.join(errors[:3])}")
        elif doc.structured_data_blocks:
            checks.note("validation", "Structured data is valid", passed=True)

        return checks.result({
            "types_found": sorted(types),
            "blocks": len(doc.structured_data_blocks),
            "has_graph": has_graph,
            "invalid_blocks": sum(1 for b in doc.structured_data_blocks if not b.is_valid),
            "microdata_types": list(doc.microdata_types),
            "validation_errors": errors,
        })

    @staticmethod
    def _validation_errors(doc: DocumentModel, items: list[dict]) -> list[str]:
        errors = []
        for block in doc.structured_data_blocks:
            if not block.is_valid:
                errors.append(f"JSON-LD block {block.index + 1} could not be parsed")
        for item in items:
            types = set(item_types(item))
            if types & ORGANIZATION_TYPES:
                if not item.get("name"):
                    errors.append("Organization missing name")
                if not item.get("url"):
                    errors.append("Organization missing url")
            if "Person" in types and not item.get("name"):
                errors.append("Person missing name")
            if types & ARTICLE_TYPES and not item.get("headline"):
                errors.append("Article missing headline")
        return errors


class AICrawlerScorer(BaseScorer):
    """Audit for AI crawler accessibility."""

    @property
    def category(self) -> Category:
        return Category.AI_CRAWLERS

    @property
    def description(self) -> str:
        return "Checks if major AI crawlers (GPTBot, ClaudeBot, etc.) can access the page"

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.crawlers
        checks = self.checklist()
        robots = doc.robots_txt if doc.robots_txt and doc.robots_txt.strip() else None
        access = crawler_access(robots, doc.path)

        blocked = [key for key, decision in access.items() if decision.status == DISALLOW]
        all_blocked = len(blocked) == len(AI_CRAWLERS)
        if robots is None:
            checks.check("robots_policy", 0, pts.robots_policy, "", "No robots.txt found")
        else:
            checks.check(
                "robots_policy", 0 if all_blocked else pts.robots_policy, pts.robots_policy,
                "robots.txt policy present",
                "robots.txt blocks every AI crawler",
            )

        sitemaps = sitemap_urls(robots) if robots else []
        has_sitemap = bool(sitemaps) or bool(doc.select('link[rel~="sitemap"]'))
        checks.check(
            "sitemap", pts.sitemap if has_sitemap else 0, pts.sitemap,
            "Sitemap declared", "No sitemap declared in robots.txt or page head",
        )

        crawlers: dict[str, str] = {}
        for key in AI_CRAWLERS:
            decision = access[key]
            max_points = getattr(pts, key)
            name = _CRAWLER_NAMES[key]
            if decision.status == ALLOW and decision.explicit:
                earned, label = max_points, "allowed"
            elif decision.status == DISALLOW:
                earned, label = 0, "blocked"
            else:
                earned, label = max_points * pts.implicit_credit, "implicit"
            crawlers[name] = label
            issue = f"{name} is blocked" if label == "blocked" else f"{name} is not explicitly allowed"
            checks.check(f"crawler_{key}", earned, max_points, f"{name} explicitly allowed", issue)

        return checks.result({
            "robots_txt_present": robots is not None,
            "crawlers": crawlers,
            "blocked": [_CRAWLER_NAMES[k] for k in blocked],
            "sitemaps": sitemaps,
        })


class EEATScorer(BaseScorer):
    """Experience, expertise, authoritativeness and trust signals."""

    @property
    def category(self) -> Category:
        return Category.EEAT

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.eeat
        checks = self.checklist()
        text = doc.text_content
        items = _nested_items(doc.schema_items())

        has_author = bool(
            doc.select('[rel~="author"], [itemprop="author"], .author, .by-author, .author-bio')
            or doc.meta_tags.get("author")
            or any("author" in item for item in items)
        )
        checks.check("author", pts.author if has_author else 0, pts.author,
                     "Author information present", "No author attribution found")

        schema_credentials = any(any(item.get(p) for p in CREDENTIAL_PROPERTIES) for item in items)
        text_credentials = bool(_CREDENTIAL_TEXT.search(text))
        if schema_credentials:
            earned = pts.credentials
        elif text_credentials:
            earned = pts.credentials / 2
        else:
            earned = 0
        checks.check("credentials", earned, pts.credentials,
                     "Credentials documented in structured data",
                     "Credentials mentioned only in text" if text_credentials else "No author credentials found")

        hrefs = [link.href.lower() for link in doc.links]
        has_about = any("about" in href for href in hrefs)
        checks.check("about", pts.about if has_about else 0, pts.about,
                     "About page linked", "No About page detected")

        has_contact = bool(
            any("contact" in href or href.startswith(("mailto:", "tel:")) for href in hrefs)
            or doc.select('[itemprop="email"], [itemprop="telephone"]')
        )
        checks.check("contact", pts.contact if has_contact else 0, pts.contact,
                     "Contact details available", "No contact information")

        has_published = bool(
            doc.select('[itemprop="datePublished"], .published, time[datetime], .date')
            or doc.meta_tags.get("article:published_time")
            or any(item.get("datePublished") for item in items)
        )
        checks.check("published_date", pts.published_date if has_published else 0, pts.published_date,
                     "Publication date present", "No publication date")

        has_modified = bool(
            doc.select('[itemprop="dateModified"], .updated, .modified')
            or doc.meta_tags.get("article:modified_time")
            or any(item.get("dateModified") for item in items)
        )
        checks.check("modified_date", pts.modified_date if has_modified else 0, pts.modified_date,
                     "Last-modified date present", "No update date")

        references = sum(
            1 for link in doc.links if not link.is_internal and link.href.startswith(("http://", "https://"))
        ) + len(_CITATION_MARKER.findall(text))
        if references >= pts.min_citations:
            earned = pts.citations
        elif references > 0:
            earned = pts.citations / 2
        else:
            earned = 0
        checks.check("citations", earned, pts.citations,
                     f"Cites {references} outbound references",
                     f"Only {references} outbound reference(s)" if references else "No citations or references")

        has_quotes = bool(_EXPERT_QUOTE.search(text) or doc.find("blockquote"))
        checks.check("expert_quotes", pts.expert_quotes if has_quotes else 0, pts.expert_quotes,
                     "Features expert opinions", "No expert quotes detected")

        has_trust = bool(doc.select(
            'img[alt*="secure" i], img[alt*="verified" i], img[alt*="certified" i], img[alt*="badge" i]'
        ))
        checks.check("trust_signals", pts.trust_signals if has_trust else 0, pts.trust_signals,
                     "Trust badges present", "No trust badges")

        has_privacy = any("privacy" in href for href in hrefs)
        has_terms = any("terms" in href for href in hrefs)
        legal = pts.legal_pages if has_privacy and has_terms else pts.legal_pages / 2 if has_privacy or has_terms else 0
        checks.check("legal_pages", legal, pts.legal_pages,
                     "Privacy policy and terms linked",
                     "Missing privacy policy or terms page")

        return checks.result({
            "has_author": has_author,
            "schema_credentials": schema_credentials,
            "text_credentials": text_credentials,
            "references": references,
            "has_privacy_policy": has_privacy,
            "has_terms": has_terms,
        })


class CitationPotentialScorer(BaseScorer):
    """How quotable the page is for answer engines."""

    @property
    def category(self) -> Category:
        return Category.CITATION_POTENTIAL

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.citation
        text = doc.text_content
        counts: dict[str, Any] = {
            "factual_statements": len(_FACTUAL.findall(text)),
            "data_points": len(_DATA_POINT.findall(text)),
            "quotes": len(_QUOTE.findall(text)),
            "references": len(_REFERENCE.findall(text)),
            "definitions": len(_DEFINITION.findall(text)),
            "unique_insights": len(_INSIGHT.findall(text)),
        }

        checks = self.checklist()
        checks.check("factual_statements", counts["factual_statements"] * pts.factual_each, pts.factual_cap,
                     "Rich factual content", "Limited factual statements - add data and statistics")
        checks.check("data_points", counts["data_points"] * pts.data_each, pts.data_cap,
                     "Good use of data", "Few data points - quantify claims when possible")
        checks.check("quotes", counts["quotes"] * pts.quotes_each, pts.quotes_cap,
                     "Includes quotations", "Few or no quotations")
        checks.check("references", counts["references"] * pts.references_each, pts.references_cap,
                     "Includes attributions and references", "Few attributed sources")
        checks.check("definitions", counts["definitions"] * pts.definitions_each, pts.definitions_cap,
                     "Provides clear definitions", "Add clear definitions for key terms")
        checks.check("unique_insights", counts["unique_insights"] * pts.insights_each, pts.insights_cap,
                     "Contains original insights", "No original analysis detected - AI prefers unique insights")

        counts["authority_indicators"] = [label for label, rx in _AUTHORITY.items() if rx.search(text)]
        return checks.result(counts)
