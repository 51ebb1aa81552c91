"""Shared test fixtures and configuration."""
from __future__ import annotations

from pathlib import Path

import pytest

from src.fetcher.html_fetcher import FetchedPage
from src.parser.document import build_document

FIXTURES_DIR = Path(__file__).parent / "fixtures"

OPEN_ROBOTS_TXT = """User-agent: GPTBot
Allow: /

User-agent: ClaudeBot
Allow: /

User-agent: PerplexityBot
Allow: /

User-agent: Google-Extended
Allow: /

User-agent: anthropic-ai
Allow: /

User-agent: cohere-ai
Allow: /

User-agent: CCBot
Allow: /

User-agent: *
Allow: /

Sitemap: https://example.com/sitemap.xml
"""

BLOCK_ALL_ROBOTS_TXT = "User-agent: *\nDisallow: /\n"

SECURITY_HEADERS = {
    "Content-Type": "text/html; charset=utf-8",
    "Strict-Transport-Security": "max-age=63072000",
    "Content-Security-Policy": "default-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def open_robots_txt() -> str:
    """robots.txt that explicitly allows every AI crawler and declares a sitemap."""
    return OPEN_ROBOTS_TXT


@pytest.fixture
def excellent_html() -> str:
    """A page that covers nearly every GEO signal."""
    return (FIXTURES_DIR / "html" / "excellent_geo.html").read_text(encoding="utf-8")


@pytest.fixture
def poor_html() -> str:
    """A bare page with almost no GEO signals."""
    return (FIXTURES_DIR / "html" / "poor_geo.html").read_text(encoding="utf-8")


@pytest.fixture
def excellent_page(excellent_html) -> FetchedPage:
    return FetchedPage(
        url="https://example.com/guides/geo",
        final_url="https://example.com/guides/geo",
        html=excellent_html,
        status_code=200,
        headers=dict(SECURITY_HEADERS),
        robots_txt=OPEN_ROBOTS_TXT,
    )


@pytest.fixture
def poor_page(poor_html) -> FetchedPage:
    return FetchedPage(
        url="http://example.com/",
        final_url="http://example.com/",
        html=poor_html,
        status_code=200,
        headers={"Content-Type": "text/html"},
        robots_txt=BLOCK_ALL_ROBOTS_TXT,
    )


@pytest.fixture
def make_doc():
    """Factory building a DocumentModel from head/body snippets."""

    def _make(
        body: str = "",
        head: str = "",
        *,
        url: str = "https://example.com/page",
        lang: str = "en",
        **kwargs,
    ):
        lang_attr = f' lang="{lang}"' if lang else ""
        html = f"<!DOCTYPE html><html{lang_attr}><head>{head}</head><body>{body}</body></html>"
        return build_document(html, url, **kwargs)

    return _make
