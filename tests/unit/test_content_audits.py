"""Unit tests for content quality and performance scorers."""
from __future__ import annotations

from src.audit.content_audits import ContentQualityScorer, PerformanceScorer
from src.nlp.content_analyzer import flesch_reading_ease
from src.parser.document import build_document


def _distinct_words(count: int) -> str:
    return " ".join(f"term{i:03d}" for i in range(count))


class TestFleschReadingEase:
    """Tests for the textstat wrapper."""

    def test_empty_text_is_none(self):
        assert flesch_reading_ease("   ") is None

    def test_simple_text_is_easy(self):
        score = flesch_reading_ease("The cat sat on the mat. The dog ran to the park. It was a fun day.")
        assert score is not None
        assert score > 60


class TestContentQualityScorer:
    """Tests for ContentQualityScorer."""

    def test_keyword_stuffing_detected(self, make_doc):
        """One keyword dominating the text is reported as stuffing."""
        body = (
            "<p>Widgets for everyone. Buy widgets today because widgets are great and "
            "widgets never fail. Our widgets ship fast, and widgets come in blue.</p>"
        )
        result = ContentQualityScorer().run(make_doc(body))
        assert result.details["keyword_stuffing_risk"] == "high"
        keyword = next(f for f in result.findings if f.signal == "keyword_usage")
        assert keyword.is_issue
        assert keyword.message.startswith("Keyword stuffing detected ('widgets'")

    def test_natural_keyword_usage(self, make_doc):
        """No keyword above the low threshold counts as natural usage."""
        result = ContentQualityScorer().run(make_doc(f"<p>{_distinct_words(40)}</p>"))
        assert result.details["keyword_stuffing_risk"] == "none"
        keyword = next(f for f in result.findings if f.signal == "keyword_usage")
        assert not keyword.is_issue

    def test_long_content_earns_full_word_count(self, make_doc):
        result = ContentQualityScorer().run(make_doc(f"<p>{_distinct_words(2000)}</p>"))
        assert result.details["word_count"] == 2000
        word_count = next(f for f in result.findings if f.signal == "word_count")
        assert not word_count.is_issue

    def test_thin_content(self, make_doc):
        result = ContentQualityScorer().run(make_doc("<p>Short page.</p>"))
        word_count = next(f for f in result.findings if f.signal == "word_count")
        assert word_count.is_issue
        assert "Thin content" in word_count.message
        readability = next(f for f in result.findings if f.signal == "readability")
        assert readability.message == "Too little text to assess readability"

    def test_structure_elements(self, make_doc):
        """Lists, tables, images and video each earn their points."""
        body = (
            "<ul><li>One</li></ul><table><tr><td>1</td></tr></table>"
            '<img src="/a.png" alt="A"><iframe src="https://www.youtube.com/embed/x"></iframe>'
        )
        result = ContentQualityScorer().run(make_doc(body))
        passed = {f.signal for f in result.strengths}
        assert {"lists", "tables", "images", "video"} <= passed
        assert result.details["video_count"] == 1

    def test_depth_from_subheadings(self, make_doc):
        body = "<h1>Topic</h1>" + "".join(f"<h2>Part {i}</h2><p>Text {i}</p>" for i in range(6))
        result = ContentQualityScorer().run(make_doc(body))
        assert result.details["content_depth"] == "deep"

    def test_passive_voice_is_a_finding_without_points(self, make_doc, monkeypatch):
        passive = make_doc("<p>The report was written by experts. The data was collected last year.</p>")
        active = make_doc("<p>Experts wrote the report. They collected the data last year.</p>")
        passive_result = ContentQualityScorer().run(passive)
        active_result = ContentQualityScorer().run(active)

        issue = next(f for f in passive_result.issues if f.signal == "passive_voice")
        assert issue.message.startswith("High passive voice usage (100%)")
        assert passive_result.details["passive_voice_percentage"] == 100
        assert any(f.signal == "passive_voice" for f in active_result.strengths)
        monkeypatch.setattr("src.audit.content_audits.readability_findings", lambda analysis: [])
        assert ContentQualityScorer().run(passive).score == passive_result.score

    def test_readability_metrics_in_details(self, make_doc):
        result = ContentQualityScorer().run(make_doc("<p>However, the API works. For example, it caches.</p>"))
        assert result.details["transition_words"] == 2
        assert result.details["jargon_density"] > 0
        assert 0 <= result.details["ai_readability_score"] <= 100

    def test_score_within_bounds(self, make_doc, excellent_html):
        result = ContentQualityScorer().run(build_document(excellent_html, "https://example.com/guides/geo"))
        assert 0 <= result.score <= 100
        assert result.details["main_content_ratio"] <= 1.0


class TestPerformanceScorer:
    """Tests for PerformanceScorer."""

    def test_light_page_scores_full(self, make_doc):
        result = PerformanceScorer().run(make_doc("<p>Small page</p>"))
        assert result.score == 100
        assert result.details["render_blocking_scripts"] == 0

    def test_render_blocking_scripts(self, make_doc):
        """Head scripts without async, defer or module type block rendering."""
        head = (
            '<script src="/a.js"></script>'
            '<script src="/b.js" defer></script>'
            '<script src="/c.js" async></script>'
            '<script src="/d.js" type="module"></script>'
        )
        result = PerformanceScorer().run(make_doc("<p>x</p>", head))
        assert result.details["render_blocking_scripts"] == 1
        assert result.details["external_scripts"] == 4
        assert result.score == 92.5

    def test_poor_page(self, poor_html):
        result = PerformanceScorer().run(build_document(poor_html, "http://example.com/"))
        # three blocking scripts and an unsized image
        assert result.score == 70
        assert result.details["images_with_dimensions"] == 0

    def test_many_images_need_lazy_loading(self, make_doc):
        body = "".join(f'<img src="/{i}.png" alt="{i}" width="1" height="1">' for i in range(25))
        result = PerformanceScorer().run(make_doc(body))
        lazy = next(f for f in result.findings if f.signal == "lazy_images")
        assert lazy.is_issue
        assert result.score == 90
