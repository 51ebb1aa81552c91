"""Classic SEO scorers: meta tags, structure, technical SEO and link analysis."""
from __future__ import annotations

from src.audit.base import BaseScorer, Category, CategoryScore
from src.geo.robots import sitemap_urls
from src.parser.document import DocumentModel

SEMANTIC_TAGS = ("article", "section", "aside", "header", "footer", "nav", "main", "figure", "time")
SECURITY_HEADERS = (
    "Strict-Transport-Security",
    "Content-Security-Policy",
    "X-Content-Type-Options",
    "X-Frame-Options",
)
GENERIC_ANCHORS = {"click here", "read more", "here", "link", "more", "this", "learn more"}


def _tiered(value: float, tiers: tuple[tuple[float, float], ...]) -> float:
    """Points for the first tier whose threshold ``value`` reaches."""
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return 0.0


def heading_skips(levels: list[int]) -> int:
    """Number of places where the outline jumps down more than one level."""
    skips = 0
    for previous, current in zip(levels, levels[1:]):
        if current > previous + 1:
            skips += 1
    return skips


class MetaTagsScorer(BaseScorer):
    """Title, description, social and head metadata."""

    @property
    def category(self) -> Category:
        return Category.META_TAGS

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.meta
        meta = doc.meta_tags
        checks = self.checklist()

        title = doc.title or ""
        if not title:
            checks.check("title", 0, pts.title, "", "Missing <title> tag")
        else:
            ideal = pts.title_min_length <= len(title) <= pts.title_max_length
            checks.check(
                "title", pts.title if ideal else pts.title / 2, pts.title,
                f"Title length is optimal ({len(title)} chars)",
                f"Title length {len(title)} chars (ideal {pts.title_min_length}-{pts.title_max_length})",
            )

        description = meta.get("description", "")
        if not description:
            checks.check("description", 0, pts.description, "", "Missing meta description")
        else:
            ideal = pts.description_min_length <= len(description) <= pts.description_max_length
            checks.check(
                "description", pts.description if ideal else pts.description / 2, pts.description,
                f"Meta description length is optimal ({len(description)} chars)",
                f"Meta description length {len(description)} chars "
                f"(ideal {pts.description_min_length}-{pts.description_max_length})",
            )

        og_present = [key for key in ("og:title", "og:description", "og:image") if meta.get(key)]
        checks.check(
            "open_graph", pts.open_graph * len(og_present) / 3, pts.open_graph,
            "Open Graph tags complete",
            f"Open Graph incomplete ({len(og_present)}/3 of title, description, image)",
        )
        checks.check(
            "twitter_card", pts.twitter_card if meta.get("twitter:card") else 0, pts.twitter_card,
            "Twitter card present", "Missing Twitter card",
        )
        canonical = doc.find("link", rel="canonical")
        checks.check(
            "canonical", pts.canonical if canonical is not None else 0, pts.canonical,
            "Canonical URL set", "Missing canonical link",
        )
        checks.check(
            "viewport", pts.viewport if meta.get("viewport") else 0, pts.viewport,
            "Viewport meta tag present", "Missing viewport meta tag",
        )
        checks.check(
            "charset", pts.charset if meta.get("charset") else 0, pts.charset,
            "Charset declared", "Missing charset declaration",
        )
        checks.check(
            "lang", pts.lang if doc.language else 0, pts.lang,
            f"Language declared ({doc.language})", "Missing lang attribute on <html>",
        )

        return checks.result({
            "title": title,
            "title_length": len(title),
            "description_length": len(description),
            "open_graph": og_present,
            "canonical": canonical.get("href") if canonical is not None else None,
        })


class StructureScorer(BaseScorer):
    """Audit for heading outline and semantic layout."""

    @property
    def category(self) -> Category:
        return Category.STRUCTURE

    @property
    def description(self) -> str:
        return "Evaluates heading hierarchy and landmarks for AI content understanding"

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.structure
        checks = self.checklist()
        levels = [h.level for h in doc.headings]

        h1_count = levels.count(1)
        if h1_count == 1:
            checks.check("single_h1", pts.single_h1, pts.single_h1, "Exactly one H1", "")
        elif h1_count > 1:
            checks.check("single_h1", pts.single_h1 / 2, pts.single_h1, "", f"Use only one H1 per page (found {h1_count})")
        else:
            checks.check("single_h1", 0, pts.single_h1, "", "No H1 heading found")

        semantic = sorted({tag for tag in SEMANTIC_TAGS if doc.find(tag) is not None})
        if len(semantic) >= 3:
            earned = pts.semantic
        elif semantic:
            earned = pts.semantic / 2
        else:
            earned = 0
        checks.check(
            "semantic", earned, pts.semantic,
            f"Uses semantic HTML ({', '.join(semantic)})",
            "Little or no semantic HTML5 sectioning",
        )

        skips = heading_skips(levels)
        checks.check(
            "hierarchy", pts.hierarchy if levels and skips == 0 else 0, pts.hierarchy,
            "Heading hierarchy has no skipped levels",
            f"Heading hierarchy skips levels {skips} time(s)" if levels else "No headings found",
        )
        for tag, points in (("nav", pts.nav), ("main", pts.main), ("footer", pts.footer)):
            present = doc.find(tag) is not None
            checks.check(tag, points if present else 0, points, f"<{tag}> element present", f"No <{tag}> element")

        return checks.result({
            "heading_count": len(levels),
            "h1_count": h1_count,
            "levels": levels,
            "skipped_levels": skips,
            "semantic_elements": semantic,
        })


class TechnicalSEOScorer(BaseScorer):
    """Crawlability, transport and indexing checks."""

    @property
    def category(self) -> Category:
        return Category.TECHNICAL_SEO

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.technical
        meta = doc.meta_tags
        checks = self.checklist()

        checks.check("viewport", pts.viewport if meta.get("viewport") else 0, pts.viewport,
                     "Viewport configured", "Missing viewport meta tag")
        checks.check("charset", pts.charset if meta.get("charset") else 0, pts.charset,
                     "Charset declared", "Missing charset declaration")
        checks.check("lang", pts.lang if doc.language else 0, pts.lang,
                     "Language attribute set", "Missing lang attribute")
        has_canonical = doc.find("link", rel="canonical") is not None
        checks.check("canonical", pts.canonical if has_canonical else 0, pts.canonical,
                     "Canonical URL set", "Missing canonical link")
        checks.check("https", pts.https if doc.is_https else 0, pts.https,
                     "Served over HTTPS", "Page is not served over HTTPS")

        has_sitemap = bool(doc.robots_txt and sitemap_urls(doc.robots_txt)) or bool(doc.select('link[rel~="sitemap"]'))
        checks.check("sitemap", pts.sitemap if has_sitemap else 0, pts.sitemap,
                     "Sitemap discoverable", "No sitemap discoverable")

        hreflang = doc.select('link[rel~="alternate"][hreflang]')
        checks.check("hreflang", pts.hreflang if hreflang else 0, pts.hreflang,
                     f"{len(hreflang)} hreflang alternates", "No hreflang alternates")

        if doc.images:
            with_alt = sum(1 for img in doc.images if img.alt and img.alt.strip())
            alt_ratio = with_alt / len(doc.images)
        else:
            alt_ratio = 1.0
        checks.check("image_alt", pts.image_alt * alt_ratio, pts.image_alt,
                     "All images have alt text", f"{round(alt_ratio * 100)}% of images have alt text")

        html_tag = doc.find("html")
        has_amp = bool(doc.select('link[rel~="amphtml"]')) or (
            html_tag is not None and (html_tag.has_attr("amp") or html_tag.has_attr("⚡"))
        )
        checks.check("amp", pts.amp if has_amp else 0, pts.amp, "AMP version available", "No AMP version")

        present_headers = [h for h in SECURITY_HEADERS if doc.header(h)]
        checks.check(
            "security_headers", pts.security_headers * len(present_headers) / len(SECURITY_HEADERS),
            pts.security_headers,
            "All security headers present",
            f"Security headers {len(present_headers)}/{len(SECURITY_HEADERS)} present",
        )

        if doc.status_code == 200:
            status_points = pts.status_ok
        elif doc.status_code < 400:
            status_points = pts.status_ok / 2
        else:
            status_points = 0
        checks.check("status", status_points, pts.status_ok,
                     "HTTP 200 response", f"HTTP status {doc.status_code}")
        checks.check("redirect", 0 if doc.was_redirected else pts.no_redirect, pts.no_redirect,
                     "No redirect chain", "Page was reached through a redirect")

        robots_meta = meta.get("robots", "").lower()
        noindex = "noindex" in robots_meta or "noindex" in doc.header("X-Robots-Tag").lower()
        checks.check("indexable", 0 if noindex else pts.indexable, pts.indexable,
                     "Page is indexable", "Page has noindex directive - AI cannot index this content")

        return checks.result({
            "is_https": doc.is_https,
            "security_headers": present_headers,
            "hreflang_count": len(hreflang),
            "image_alt_ratio": round(alt_ratio, 3),
            "status_code": doc.status_code,
            "was_redirected": doc.was_redirected,
            "noindex": noindex,
        })


class LinkAnalysisScorer(BaseScorer):
    """Link volume, balance, anchor quality and nofollow usage."""

    @property
    def category(self) -> Category:
        return Category.LINK_ANALYSIS

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.links
        checks = self.checklist()

        links = doc.links
        total = len(links)
        internal = sum(1 for link in links if link.is_internal)
        external = sum(
            1 for link in links if not link.is_internal and link.href.startswith(("http://", "https://"))
        )
        nofollow = sum(1 for link in links if link.nofollow)
        empty = sum(1 for link in links if not link.anchor_text)
        meaningful = sum(
            1 for link in links
            if len(link.anchor_text) > 3 and link.anchor_text.lower() not in GENERIC_ANCHORS
        )
        anchor_quality = round(meaningful / total * 100) if total else 0
        nofollow_ratio = nofollow / total * 100 if total else 0.0

        tiers_total = ((20, pts.total_links), (10, pts.total_links * 0.75), (5, pts.total_links * 0.5),
                       (1, pts.total_links * 0.25))
        checks.check("total_links", _tiered(total, tiers_total), pts.total_links,
                     f"{total} links found", f"Only {total} links found" if total else "No links found on the page")

        tiers_internal = ((15, pts.internal_links), (10, pts.internal_links * 0.75), (5, pts.internal_links * 0.5),
                          (1, pts.internal_links * 0.25))
        checks.check("internal_links", _tiered(internal, tiers_internal), pts.internal_links,
                     f"{internal} internal links help with site navigation",
                     "Very few internal links - poor site structure connectivity")

        if 3 <= external <= 20:
            ext_points = pts.external_links
        elif external > 0:
            ext_points = pts.external_links * 2 / 3
        else:
            ext_points = 0
        checks.check("external_links", ext_points, pts.external_links,
                     f"{external} external links show research and credibility",
                     "No external links - may signal lack of research and citations" if external == 0
                     else f"{external} external links (ideal 3-20)")

        checks.check("anchor_quality", pts.anchor_quality * anchor_quality / 100, pts.anchor_quality,
                     "Anchor text is descriptive", f"Anchor text quality {anchor_quality}% - use descriptive link text")

        distribution = self._distribution(internal, external, anchor_quality) if total else "none"
        dist_points = {
            "excellent": pts.distribution,
            "good": pts.distribution * 0.8,
            "fair": pts.distribution * 8 / 15,
            "poor": pts.distribution * 0.2,
            "none": 0,
        }[distribution]
        checks.check("distribution", dist_points, pts.distribution,
                     "Excellent link distribution and structure",
                     f"Link distribution is {distribution} - balance internal and external links")

        if not total:
            nf_points = 0
        elif nofollow_ratio < 10:
            nf_points = pts.nofollow
        elif nofollow_ratio < 30:
            nf_points = pts.nofollow * 0.7
        elif nofollow_ratio < 50:
            nf_points = pts.nofollow * 0.4
        else:
            nf_points = 0
        checks.check("nofollow", nf_points, pts.nofollow,
                     "Low nofollow ratio",
                     f"High nofollow ratio ({round(nofollow_ratio)}%)" if total else "No links to evaluate")

        if empty > 5:
            checks.deduct("empty_anchors", pts.empty_anchor_penalty_high,
                          f"{empty} links with empty anchor text - bad for accessibility and SEO")
        elif empty > 2:
            checks.deduct("empty_anchors", pts.empty_anchor_penalty_low,
                          f"{empty} links with empty anchor text - bad for accessibility and SEO")

        return checks.result({
            "total_links": total,
            "internal_links": internal,
            "external_links": external,
            "nofollow_links": nofollow,
            "nofollow_ratio": round(nofollow_ratio, 2),
            "empty_anchors": empty,
            "anchor_text_quality": anchor_quality,
            "link_distribution": distribution,
        })

    @staticmethod
    def _distribution(internal: int, external: int, anchor_quality: int) -> str:
        ratio = internal / external if external else internal
        if ratio >= 3 and anchor_quality >= 70:
            return "excellent"
        if ratio >= 2 and anchor_quality >= 50:
            return "good"
        if ratio >= 1:
            return "fair"
        return "poor"
