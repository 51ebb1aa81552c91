"""Content quality and page performance scorers."""
from __future__ import annotations

from src.audit.base import BaseScorer, Category, CategoryScore
from src.nlp.content_analyzer import analyze_content, readability_findings
from src.parser.document import DocumentModel


class ContentQualityScorer(BaseScorer):
    """Audit for content depth, readability and language quality."""

    @property
    def category(self) -> Category:
        return Category.CONTENT_QUALITY

    @property
    def description(self) -> str:
        return "Evaluates length, readability, media, depth and keyword usage"

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.content
        checks = self.checklist()
        text = doc.text_content
        word_count = doc.word_count
        has_lists = doc.find(["ul", "ol"]) is not None
        paragraphs = len(doc.find_all("p"))
        analysis = analyze_content(text, structured=bool(doc.headings) and has_lists and paragraphs > 3)

        factor = 0.0
        for threshold, share in pts.word_count_tiers:
            if word_count >= threshold:
                factor = share
                break
        checks.check("word_count", pts.word_count * factor, pts.word_count,
                     f"Comprehensive content ({word_count} words)",
                     f"Thin content ({word_count} words) - aim for 1000+ words")

        flesch = analysis.readability_score
        low, high = pts.flesch_ideal
        acceptable_low, acceptable_high = pts.flesch_acceptable
        if flesch is None or word_count < pts.min_readability_words:
            earned = 0.0
        elif low <= flesch <= high:
            earned = pts.readability
        elif acceptable_low <= flesch <= acceptable_high:
            earned = pts.readability * 0.75
        else:
            earned = pts.readability * 0.5
        checks.check("readability", earned, pts.readability,
                     f"Readability in the ideal range (Flesch {flesch:.1f})" if flesch is not None else "",
                     "Too little text to assess readability" if earned == 0
                     else f"Readability outside the ideal range (Flesch {flesch:.1f})")

        checks.check("lists", pts.lists if has_lists else 0, pts.lists,
                     "Uses lists", "No lists - structured lists are easy for AI to quote")
        has_tables = doc.find("table") is not None
        checks.check("tables", pts.tables if has_tables else 0, pts.tables,
                     "Uses tables", "No data tables")
        checks.check("paragraphs", pts.paragraphs if paragraphs > 10 else 0, pts.paragraphs,
                     f"{paragraphs} paragraphs", f"Only {paragraphs} paragraphs")
        checks.check("images", pts.images if doc.images else 0, pts.images,
                     f"{len(doc.images)} images support the text", "No images")
        videos = len(doc.select('video, iframe[src*="youtube"], iframe[src*="vimeo"]'))
        checks.check("video", pts.video if videos else 0, pts.video,
                     "Video content present", "No video content")

        internal = sum(1 for link in doc.links if link.is_internal)
        external = sum(1 for link in doc.links if not link.is_internal and link.href.startswith(("http://", "https://")))
        checks.check("internal_links", pts.internal_links if internal > 3 else 0, pts.internal_links,
                     "Links to related internal content", "Few contextual internal links")
        checks.check("external_links", pts.external_links if external > 2 else 0, pts.external_links,
                     "Links to external sources", "Few external source links")

        subheadings = sum(1 for h in doc.headings if h.level > 1)
        if subheadings >= 6:
            depth, depth_points = "deep", pts.depth
        elif subheadings >= 3:
            depth, depth_points = "moderate", pts.depth * 0.7
        elif subheadings >= 1:
            depth, depth_points = "shallow", pts.depth * 0.3
        else:
            depth, depth_points = "none", 0.0
        checks.check("depth", depth_points, pts.depth,
                     f"Deep topical coverage ({subheadings} subheadings)",
                     f"Content depth is {depth} ({subheadings} subheadings)")

        stuffing = analysis.keyword_stuffing_risk
        if not analysis.primary_keywords:
            keyword_points, keyword_issue = 0.0, "No keywords detected"
        elif stuffing == "none":
            keyword_points, keyword_issue = pts.keyword_usage, ""
        elif stuffing == "low":
            keyword_points, keyword_issue = pts.keyword_usage / 2, "Keyword density is slightly high"
        else:
            top = analysis.primary_keywords[0]
            keyword_points = 0.0
            keyword_issue = f"Keyword stuffing detected ('{top.word}' at {top.density:.1f}% density)"
        checks.check("keyword_usage", keyword_points, pts.keyword_usage,
                     "Natural keyword usage without stuffing", keyword_issue)

        vocab = analysis.vocabulary_diversity
        if vocab >= 0.5:
            vocab_points = pts.vocabulary
        elif vocab >= 0.3:
            vocab_points = pts.vocabulary / 2
        else:
            vocab_points = 0.0
        checks.check("vocabulary", vocab_points, pts.vocabulary,
                     f"Rich vocabulary ({vocab:.0%} unique)",
                     f"Limited vocabulary diversity ({vocab:.0%} unique)")

        variety = analysis.sentence_length_variety
        checks.check("sentence_variety", pts.sentence_variety if variety != "low" else pts.sentence_variety / 2,
                     pts.sentence_variety, f"Sentence length variety is {variety}",
                     "Sentence lengths are monotonous - vary sentence length")

        for signal, message, passed in readability_findings(analysis):
            checks.note(signal, message, passed=passed)

        main_ratio = len(doc.main_content) / len(text) if text else 0.0
        return checks.result({
            "word_count": word_count,
            "flesch_reading_ease": round(flesch, 2) if flesch is not None else None,
            "paragraph_count": paragraphs,
            "video_count": videos,
            "content_depth": depth,
            "main_content_ratio": round(min(main_ratio, 1.0), 3),
            "keyword_stuffing_risk": stuffing,
            "vocabulary_diversity": round(vocab, 3),
            "sentence_length_variety": variety,
            "ai_readability_score": analysis.ai_readability_score,
            "passive_voice_percentage": analysis.passive_voice_percentage,
            "jargon_density": analysis.jargon_density,
            "transition_words": analysis.transition_words,
            "content_gaps": list(analysis.content_gaps),
        })


class PerformanceScorer(BaseScorer):
    """Static page-weight heuristics; no network timing is measured."""

    @property
    def category(self) -> Category:
        return Category.PERFORMANCE

    def run(self, doc: DocumentModel) -> CategoryScore:
        pts = self.config.performance
        checks = self.checklist()

        size = doc.html_size
        if size <= pts.html_good_bytes:
            size_points = pts.html_weight
        elif size <= pts.html_max_bytes:
            size_points = pts.html_weight / 2
        else:
            size_points = 0
        checks.check("html_weight", size_points, pts.html_weight,
                     f"Lightweight HTML ({size // 1024} KB)", f"Heavy HTML ({size // 1024} KB)")

        scripts = len(doc.select("script[src]"))
        if scripts <= pts.scripts_good:
            script_points = pts.scripts
        elif scripts <= pts.scripts_max:
            script_points = pts.scripts / 2
        else:
            script_points = 0
        checks.check("scripts", script_points, pts.scripts,
                     f"{scripts} external scripts", f"Too many external scripts ({scripts})")

        stylesheets = len(doc.select('link[rel~="stylesheet"]'))
        checks.check("stylesheets", pts.stylesheets if stylesheets <= pts.stylesheets_max else 0, pts.stylesheets,
                     f"{stylesheets} stylesheets", f"Too many stylesheets ({stylesheets})")

        images = len(doc.images)
        lazy = sum(1 for img in doc.images if (img.loading or "").lower() == "lazy")
        lazy_ok = images <= pts.lazy_image_threshold or lazy > 0
        checks.check("lazy_images", pts.lazy_images if lazy_ok else 0, pts.lazy_images,
                     "Image loading is under control",
                     f"{images} images without lazy loading")

        sized = sum(1 for img in doc.images if img.has_dimensions)
        sized_ratio = sized / images if images else 1.0
        checks.check("image_dimensions", pts.image_dimensions * sized_ratio, pts.image_dimensions,
                     "All images declare width and height",
                     f"{images - sized} images without explicit dimensions (layout shift risk)")

        head = doc.find("head")
        blocking = 0
        if head is not None:
            for script in head.find_all("script", src=True):
                if not script.has_attr("async") and not script.has_attr("defer") and script.get("type") != "module":
                    blocking += 1
        if blocking == 0:
            blocking_points = pts.render_blocking
        elif blocking <= 2:
            blocking_points = pts.render_blocking / 2
        else:
            blocking_points = 0
        checks.check("render_blocking", blocking_points, pts.render_blocking,
                     "No render-blocking scripts in <head>",
                     f"{blocking} render-blocking script(s) in <head>")

        return checks.result({
            "html_size": size,
            "external_scripts": scripts,
            "stylesheets": stylesheets,
            "images": images,
            "lazy_images": lazy,
            "images_with_dimensions": sized,
            "render_blocking_scripts": blocking,
        })
