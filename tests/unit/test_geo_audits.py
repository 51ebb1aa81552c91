"""Unit tests for the GEO scorers."""
from __future__ import annotations

import json

from src.audit.base import Category
from src.audit.geo_audits import AICrawlerScorer, CitationPotentialScorer, EEATScorer, SchemaMarkupScorer
from src.parser.document import document_from_page


def _json_ld(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


class TestSchemaMarkupScorer:
    """Tests for SchemaMarkupScorer."""

    def test_no_structured_data_scores_zero(self, make_doc):
        """A page without markup earns nothing and reports every type as missing."""
        result = SchemaMarkupScorer().run(make_doc("<p>Plain page</p>"))
        assert result.category is Category.SCHEMA_MARKUP
        assert result.score == 0
        signals = {f.signal for f in result.issues}
        assert {"organization", "website", "person", "article", "faq"} <= signals

    def test_organization_and_website(self, make_doc):
        """Valid Organization and WebSite markup earn their allocations."""
        head = _json_ld([
            {"@type": "Organization", "name": "Acme", "url": "https://acme.test"},
            {"@type": "WebSite", "name": "Acme", "url": "https://acme.test"},
        ])
        result = SchemaMarkupScorer().run(make_doc("<p>x</p>", head))
        assert result.score == 40
        assert "Organization" in result.details["types_found"]
        assert result.details["validation_errors"] == []

    def test_full_graph(self, excellent_page):
        """The reference page covers the main types inside a @graph."""
        result = SchemaMarkupScorer().run(document_from_page(excellent_page))
        assert result.details["has_graph"] is True
        assert result.score == 85

    def test_validation_errors_deduct_points(self, make_doc):
        """Missing required properties cost points per error."""
        head = _json_ld({"@type": "Organization"})
        result = SchemaMarkupScorer().run(make_doc("<p>x</p>", head))
        # 20 for the type, minus 2 x 2 for missing name and url
        assert result.score == 16
        assert "Organization missing name" in result.details["validation_errors"]
        assert any(f.signal == "validation" for f in result.issues)

    def test_unparseable_block_is_an_error(self, make_doc):
        """Broken JSON-LD is reported and never crashes the scorer."""
        head = '<script type="application/ld+json">{"@type": "Organization",</script>'
        result = SchemaMarkupScorer().run(make_doc("<p>x</p>", head))
        assert result.score == 0
        assert result.details["invalid_blocks"] == 1

    def test_nested_aggregate_rating_counts_as_review(self, make_doc):
        """aggregateRating inside a Product counts as review markup."""
        head = _json_ld({
            "@type": "Product",
            "name": "Widget",
            "aggregateRating": {"@type": "AggregateRating", "ratingValue": "4.5"},
        })
        result = SchemaMarkupScorer().run(make_doc("<p>x</p>", head))
        assert result.score == 10


class TestAICrawlerScorer:
    """Tests for AICrawlerScorer."""

    def test_all_blocked_scores_zero(self, make_doc):
        """A wildcard disallow blocks every crawler and the policy earns nothing."""
        doc = make_doc("<p>x</p>", robots_txt="User-agent: *\nDisallow: /\n")
        result = AICrawlerScorer().run(doc)
        assert result.score == 0
        assert set(result.details["crawlers"].values()) == {"blocked"}
        assert len(result.details["blocked"]) == 7

    def test_missing_robots_txt_gives_implicit_credit(self, make_doc):
        """Without robots.txt every crawler is implicitly allowed at half credit."""
        result = AICrawlerScorer().run(make_doc("<p>x</p>"))
        assert result.details["robots_txt_present"] is False
        assert set(result.details["crawlers"].values()) == {"implicit"}
        # half of the 75 crawler points; no policy, no sitemap
        assert result.score == 37.5

    def test_explicit_allows_with_wildcard_block(self, make_doc):
        """Named crawlers allowed, everyone else blocked."""
        robots = (
            "User-agent: GPTBot\nAllow: /\n\n"
            "User-agent: Claude-Web\nAllow: /\n\n"
            "User-agent: PerplexityBot\nAllow: /\n\n"
            "User-agent: *\nDisallow: /\n"
        )
        result = AICrawlerScorer().run(make_doc("<p>x</p>", robots_txt=robots))
        crawlers = result.details["crawlers"]
        assert crawlers["GPTBot"] == "allowed"
        assert crawlers["Claude-Web/ClaudeBot"] == "allowed"
        assert crawlers["PerplexityBot"] == "allowed"
        assert crawlers["CCBot"] == "blocked"
        # policy 15 + GPTBot 20 + Claude 15 + Perplexity 15
        assert result.score == 65

    def test_disallow_star_blocks_named_crawler(self, make_doc):
        result = AICrawlerScorer().run(make_doc("<p>x</p>", robots_txt="User-agent: GPTBot\nDisallow: /*\n"))
        assert result.details["crawlers"]["GPTBot"] == "blocked"
        assert result.details["blocked"] == ["GPTBot"]
        # policy 15 + half of the other 55 crawler points
        assert result.score == 42.5

    def test_own_group_without_matching_rule_allows(self, make_doc):
        robots = "User-agent: GPTBot\nDisallow: /private\n"
        result = AICrawlerScorer().run(make_doc("<p>x</p>", robots_txt=robots))
        assert result.details["crawlers"]["GPTBot"] == "allowed"
        # policy 15 + GPTBot 20 + half of the other 55 crawler points
        assert result.score == 62.5

    def test_open_robots_with_sitemap_is_perfect(self, make_doc, open_robots_txt):
        result = AICrawlerScorer().run(make_doc("<p>x</p>", robots_txt=open_robots_txt))
        assert result.score == 100
        assert result.details["sitemaps"] == ["https://example.com/sitemap.xml"]
        assert result.issues == []


class TestEEATScorer:
    """Tests for EEATScorer."""

    def test_bare_page_scores_zero(self, make_doc):
        result = EEATScorer().run(make_doc("<p>Nothing to see</p>"))
        assert result.score == 0

    def test_author_and_legal_links(self, make_doc):
        """Author, About, Contact and legal links are recognized."""
        body = (
            '<span class="author">Jane Doe</span>'
            '<a href="/about">About us</a><a href="/contact">Contact</a>'
            '<a href="/privacy">Privacy</a><a href="/terms">Terms</a>'
        )
        result = EEATScorer().run(make_doc(body))
        passed = {f.signal for f in result.strengths}
        assert {"author", "about", "contact", "legal_pages"} <= passed
        assert result.score == 40

    def test_text_credentials_get_half_credit(self, make_doc):
        """Credentials only mentioned in prose earn half the allocation."""
        result = EEATScorer().run(make_doc("<p>Written by a board-certified physician.</p>"))
        assert result.details["text_credentials"] is True
        assert result.details["schema_credentials"] is False
        assert result.score == 10

    def test_schema_credentials_get_full_credit(self, make_doc):
        head = _json_ld({
            "@type": "Article",
            "headline": "Guide",
            "author": {"@type": "Person", "name": "Jane", "jobTitle": "Editor"},
        })
        result = EEATScorer().run(make_doc("<p>x</p>", head))
        assert result.details["schema_credentials"] is True
        assert result.details["has_author"] is True


class TestCitationPotentialScorer:
    """Tests for CitationPotentialScorer."""

    def test_counts_citable_patterns(self, make_doc):
        body = (
            "<p>According to the survey, 45% of teams adopted it in 2024.</p>"
            "<p>Revenue reached $30 million. We found that adoption doubled.</p>"
            '<p>"Structure matters," said the lead researcher.</p>'
            "<p>Schema markup refers to structured data embedded in a page.</p>"
        )
        result = CitationPotentialScorer().run(make_doc(body))
        assert result.details["factual_statements"] >= 3
        assert result.details["references"] == 1
        assert result.details["quotes"] == 1
        assert result.details["definitions"] == 1
        assert result.details["unique_insights"] == 1
        assert result.score > 40

    def test_caps_limit_each_signal(self, make_doc):
        """Repeating one pattern cannot exceed its cap."""
        body = "<p>" + " ".join(f"Up {n}% this year." for n in range(10, 40)) + "</p>"
        result = CitationPotentialScorer().run(make_doc(body))
        # factual cap 25 + data cap 20
        assert result.score == 45

    def test_authority_indicators(self, make_doc):
        result = CitationPotentialScorer().run(make_doc("<p>I have 10 years of experience and am certified.</p>"))
        assert "Experience stated" in result.details["authority_indicators"]
        assert "Certifications mentioned" in result.details["authority_indicators"]
