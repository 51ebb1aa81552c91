"""Advanced audits reported next to the weighted categories.

These do not feed the overall score. Core Web Vitals are estimated from the
markup alone, so every finding they produce is flagged ``is_estimated``.
"""
from __future__ import annotations

import re

from src.audit.base import BaseScorer, Category, CategoryScore
from src.parser.document import DocumentModel

_RESPONSIVE_FONT = re.compile(r"font-size:\s*[\d.]+(?:rem|em|%|vw)", re.IGNORECASE)
_CURRENCY = re.compile(r"[$€£¥₹₽]")
_PRIVACY_TEXT = re.compile(r"privacy|privacidade|confidentialité", re.IGNORECASE)
_TERMS_TEXT = re.compile(r"terms|\btos\b|conditions", re.IGNORECASE)

GOOD = "good"
NEEDS_IMPROVEMENT = "needs-improvement"
POOR = "poor"


def _grade(value: float, good: float, needs_improvement: float) -> str:
    if value <= good:
        return GOOD
    if value <= needs_improvement:
        return NEEDS_IMPROVEMENT
    return POOR


def estimate_web_vitals(doc: DocumentModel) -> dict[str, float]:
    """Rough LCP/FID/CLS values from page weight, script count and image sizing."""
    size = doc.html_size
    scripts = len(doc.select("script[src]"))
    if size > 500_000:
        lcp = 3500
    elif size > 200_000:
        lcp = 2200
    else:
        lcp = 1800
    if scripts > 20:
        fid = 150
    elif scripts > 10:
        fid = 80
    else:
        fid = 50
    cls = 0.15 if any(not img.has_dimensions for img in doc.images) else 0.05
    return {"lcp": lcp, "fid": fid, "cls": cls}


class CoreWebVitalsAudit(BaseScorer):
    """Estimated Core Web Vitals."""

    @property
    def category(self) -> Category:
        return Category.CORE_WEB_VITALS

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.web_vitals
        checks = self.checklist(estimated=True)
        vitals = estimate_web_vitals(doc)
        grades = {
            "lcp": _grade(vitals["lcp"], 2500, 4000),
            "fid": _grade(vitals["fid"], 100, 300),
            "cls": _grade(vitals["cls"], 0.1, 0.25),
        }
        labels = {
            "lcp": ("LCP", f"{vitals['lcp']}ms", "Target: <2500ms. Optimize the largest content element."),
            "fid": ("FID", f"{vitals['fid']}ms", "Target: <100ms. Reduce JavaScript execution time."),
            "cls": ("CLS", f"{vitals['cls']:.3f}", "Target: <0.1. Add width/height to images."),
        }
        for index, metric in enumerate(("lcp", "fid", "cls")):
            max_points = getattr(pts, metric)
            grade = grades[metric]
            if grade == GOOD:
                earned = max_points
            elif grade == NEEDS_IMPROVEMENT:
                earned = pts.needs_improvement[index]
            else:
                earned = pts.poor[index]
            name, value, hint = labels[metric]
            checks.check(metric, earned, max_points,
                         f"Estimated {name} {value} (good)",
                         f"Estimated {name} {value} ({grade}). {hint}")

        return checks.result({
            "estimated": True,
            "lcp_ms": vitals["lcp"],
            "fid_ms": vitals["fid"],
            "cls": vitals["cls"],
            "grades": grades,
            "page_size": doc.html_size,
        })


class SecurityAudit(BaseScorer):
    """Transport, policy headers and privacy compliance signals."""

    @property
    def category(self) -> Category:
        return Category.SECURITY

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.security
        checks = self.checklist()

        checks.check("https", pts.https if doc.is_https else 0, pts.https,
                     "Site uses HTTPS encryption",
                     "Site is not using HTTPS. This is a major security risk and SEO penalty.")

        has_csp = bool(doc.header("Content-Security-Policy") or doc.meta_tags.get("http-equiv:content-security-policy"))
        checks.check("csp", pts.csp if has_csp else 0, pts.csp,
                     "Content-Security-Policy configured",
                     "Missing Content-Security-Policy. Protects against XSS attacks.")

        has_referrer = bool(doc.header("Referrer-Policy") or doc.meta_tags.get("referrer"))
        checks.check("referrer_policy", pts.referrer_policy if has_referrer else 0, pts.referrer_policy,
                     "Referrer-Policy configured",
                     "Missing Referrer-Policy. Controls referrer information leakage.")

        has_privacy = any(
            _PRIVACY_TEXT.search(link.anchor_text) or "privacy" in link.href.lower() for link in doc.links
        )
        checks.check("privacy_policy", pts.privacy_policy if has_privacy else 0, pts.privacy_policy,
                     "Privacy Policy found",
                     "No Privacy Policy detected. Required for legal compliance and user trust.")

        has_terms = any(_TERMS_TEXT.search(link.anchor_text) or "terms" in link.href.lower() for link in doc.links)
        checks.check("terms", pts.terms if has_terms else 0, pts.terms,
                     "Terms of Service found",
                     "No Terms of Service detected. Recommended for legal protection.")

        has_cookie = bool(doc.select('[class*="cookie"], [id*="cookie"]')) or "cookie" in doc.text_content.lower()
        checks.check("cookie_consent", pts.cookie_consent if has_cookie else 0, pts.cookie_consent,
                     "Cookie consent detected",
                     "No cookie consent mechanism detected. Required for GDPR compliance.")

        gdpr = has_privacy and has_cookie
        checks.check("gdpr", pts.gdpr if gdpr else 0, pts.gdpr,
                     "GDPR indicators present (privacy policy and consent)",
                     "GDPR indicators incomplete")

        return checks.result({
            "is_https": doc.is_https,
            "content_security_policy": has_csp,
            "referrer_policy": has_referrer,
            "has_privacy_policy": has_privacy,
            "has_terms_of_service": has_terms,
            "has_cookie_consent": has_cookie,
            "has_gdpr_compliance": gdpr,
        })


class MobileFirstAudit(BaseScorer):
    """Viewport, responsive assets and installability."""

    @property
    def category(self) -> Category:
        return Category.MOBILE

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.mobile
        checks = self.checklist()

        viewport = doc.meta_tags.get("viewport", "")
        checks.check("viewport", pts.viewport if viewport else 0, pts.viewport,
                     "Viewport meta tag present",
                     "Missing viewport meta tag. Essential for mobile responsiveness.")
        responsive = "width=device-width" in viewport.replace(" ", "")
        checks.check("responsive_viewport", pts.responsive_viewport if responsive else 0, pts.responsive_viewport,
                     "Proper viewport configuration for mobile devices",
                     "Viewport not configured for responsive design (missing width=device-width)")

        flexible = any(img.has_srcset for img in doc.images) or bool(doc.find("picture"))
        checks.check("flexible_images", pts.flexible_images if flexible else 0, pts.flexible_images,
                     "Images use responsive techniques",
                     "Images lack responsive attributes (srcset, picture)")

        style_text = " ".join(style.get_text() for style in doc.find_all("style"))
        fonts = bool(_RESPONSIVE_FONT.search(style_text))
        checks.check("responsive_fonts", pts.responsive_fonts if fonts else 0, pts.responsive_fonts,
                     "Responsive font units used", "No responsive font units (rem, em, %, vw) in inline styles")

        has_manifest = bool(doc.select('link[rel~="manifest"]'))
        has_pwa = has_manifest and bool(doc.meta_tags.get("theme-color"))
        checks.check("pwa", pts.pwa if has_pwa else 0, pts.pwa,
                     "Progressive Web App (PWA) detected", "Not installable as a PWA (manifest and theme-color)")
        checks.check("manifest", pts.manifest if has_manifest else 0, pts.manifest,
                     "Web App Manifest configured", "No Web App Manifest")

        return checks.result({
            "viewport": viewport,
            "is_responsive": responsive,
            "has_flexible_images": flexible,
            "has_responsive_fonts": fonts,
            "has_manifest": has_manifest,
            "has_pwa": has_pwa,
            "has_amp": bool(doc.select('link[rel~="amphtml"]')),
        })


class AccessibilityAudit(BaseScorer):
    """Screen reader and keyboard navigation basics with a WCAG level estimate."""

    @property
    def category(self) -> Category:
        return Category.ACCESSIBILITY

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.accessibility
        checks = self.checklist()

        checks.check("lang", pts.lang if doc.language else 0, pts.lang,
                     "Language attribute configured",
                     "Missing lang attribute on <html>. Required for screen readers.")

        semantic = doc.find(["main", "nav", "header", "footer", "article", "section", "aside"]) is not None
        checks.check("semantic_html", pts.semantic_html if semantic else 0, pts.semantic_html,
                     "Semantic HTML5 structure",
                     "Minimal semantic HTML5 elements. Use <main>, <nav>, <header>, <footer>.")

        aria_labels = len(doc.select("[aria-label], [aria-labelledby]"))
        checks.check("aria_labels", pts.aria_labels if aria_labels else 0, pts.aria_labels,
                     f"{aria_labels} ARIA labels", "No ARIA labels")
        aria_roles = len(doc.select("[role]"))
        checks.check("aria_roles", pts.aria_roles if aria_roles else 0, pts.aria_roles,
                     f"{aria_roles} ARIA roles", "No ARIA roles")

        images = len(doc.images)
        with_alt = sum(1 for img in doc.images if img.alt and img.alt.strip())
        alt_ratio = with_alt / images if images else 1.0
        checks.check("image_alt", pts.image_alt * alt_ratio, pts.image_alt,
                     "All images have alt text",
                     f"{images - with_alt} image(s) missing alt text. Required for screen readers.")

        inputs = [
            element for element in doc.find_all(["input", "textarea", "select"])
            if element.get("type", "").lower() not in {"hidden", "submit", "button", "image", "reset"}
        ]
        labeled = sum(1 for element in inputs if self._is_labeled(doc, element))
        label_ratio = labeled / len(inputs) if inputs else 1.0
        checks.check("form_labels", pts.form_labels * label_ratio, pts.form_labels,
                     "Form inputs properly labeled",
                     f"{len(inputs) - labeled} form input(s) lack labels")

        skip = any(
            link.get("href", "").startswith("#") and "skip" in link.get_text(" ", strip=True).lower()
            for link in doc.find_all("a", href=True)
        )
        checks.check("skip_links", pts.skip_links if skip else 0, pts.skip_links,
                     "Skip navigation link present",
                     "No skip navigation links detected. Helps keyboard users navigate faster.")

        wcag = "None"
        for level, threshold in pts.wcag_levels:
            if checks.points >= threshold:
                wcag = level
                break

        return checks.result({
            "wcag_level": wcag,
            "aria_labels": aria_labels,
            "aria_roles": aria_roles,
            "images_missing_alt": images - with_alt,
            "form_inputs": len(inputs),
            "labeled_inputs": labeled,
            "has_skip_links": skip,
        })

    @staticmethod
    def _is_labeled(doc: DocumentModel, element) -> bool:
        if element.get("aria-label") or element.get("aria-labelledby"):
            return True
        if element.find_parent("label") is not None:
            return True
        element_id = element.get("id")
        return bool(element_id) and doc.find("label", attrs={"for": element_id}) is not None


class InternationalSEOAudit(BaseScorer):
    """Language targeting and localisation signals on top of a fixed baseline."""

    @property
    def category(self) -> Category:
        return Category.INTERNATIONAL

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.international
        checks = self.checklist()
        checks.note("baseline", f"Baseline of {pts.baseline:g} points for a reachable page", passed=True)

        checks.check("lang", pts.lang if doc.language else 0, pts.lang,
                     f"Language declared: {doc.language}",
                     "Missing lang attribute. Specify primary language for international SEO.")

        hreflang_tags = [
            {"lang": link.get("hreflang", ""), "url": link.get("href", "")}
            for link in doc.select('link[rel~="alternate"][hreflang]')
        ]
        has_default = any(tag["lang"].lower() == "x-default" for tag in hreflang_tags)
        if not hreflang_tags:
            checks.check("hreflang", 0, pts.hreflang, "", "No hreflang tags for international targeting")
        elif has_default:
            checks.check("hreflang", pts.hreflang, pts.hreflang,
                         f"{len(hreflang_tags)} hreflang tags configured", "")
        else:
            checks.check("hreflang", pts.hreflang_without_default, pts.hreflang, "",
                         "Missing x-default hreflang tag for international fallback")

        switcher = bool(doc.select('[class*="lang"], [class*="language"], select[name*="lang"]'))
        checks.check("language_switcher", pts.language_switcher if switcher else 0, pts.language_switcher,
                     "Language switcher available", "No language switcher")

        intl_schema = any(item.get("inLanguage") or item.get("availableLanguage") for item in doc.schema_items())
        checks.check("international_schema", pts.international_schema if intl_schema else 0,
                     pts.international_schema,
                     "International schema markup configured", "No inLanguage/availableLanguage in schema")

        countries = sorted({tag["lang"].split("-")[1].upper() for tag in hreflang_tags if "-" in tag["lang"]
                            and tag["lang"].lower() != "x-default"})
        currencies = sorted(set(_CURRENCY.findall(doc.text_content)))
        return checks.result({
            "lang": doc.language or None,
            "hreflang_tags": hreflang_tags,
            "has_x_default": has_default,
            "target_countries": countries,
            "currency_symbols": currencies,
            "is_multilingual": len(hreflang_tags) > 1 or switcher,
        }, score=pts.baseline + checks.points)
