"""Unit tests for the heuristic content analyzer."""
from __future__ import annotations

import pytest

from src.nlp.content_analyzer import (
    Keyword,
    ai_readability_score,
    analyze_content,
    analyze_sentiment,
    classify_content_type,
    classify_sentence_complexity,
    count_transition_words,
    detect_keyword_stuffing,
    extract_entities,
    extract_keywords,
    jargon_density,
    passive_voice_percentage,
    sentence_statistics,
    tokenize,
)


class TestTokenize:
    def test_strips_punctuation_and_short_words(self):
        assert tokenize("Hello, World! It's an AI-driven web.") == ["hello", "world", "it's", "ai-driven", "web"]

    def test_min_length(self):
        assert tokenize("go to the big shop", min_length=4) == ["shop"]


class TestKeywords:
    """Keyword extraction and stuffing detection."""

    def test_density_excludes_stop_words(self):
        keywords = extract_keywords(["seo", "the", "geo", "seo", "ranking", "and"])
        assert [kw.word for kw in keywords] == ["seo", "geo", "ranking"]
        assert keywords[0].frequency == 2
        assert keywords[0].density == 50

    def test_no_content_words(self):
        assert extract_keywords(["the", "and"]) == []

    @pytest.mark.parametrize("density,expected", [(6.0, "high"), (4.0, "low"), (3.0, "none"), (1.0, "none")])
    def test_stuffing_thresholds(self, density, expected):
        assert detect_keyword_stuffing([Keyword("widget", 3, density)]) == expected

    def test_stuffing_without_keywords(self):
        assert detect_keyword_stuffing([]) == "none"


class TestSentenceStatistics:
    def test_uniform_sentences_have_low_variety(self):
        mean, stddev, variety = sentence_statistics("One two three. Four five six. Seven eight nine.")
        assert mean == 3
        assert stddev == 0
        assert variety == "low"

    def test_empty_text(self):
        assert sentence_statistics("") == (0.0, 0.0, "low")


class TestSentimentAndType:
    def test_positive_sentiment(self):
        score, label = analyze_sentiment(["great", "excellent", "bad"])
        assert label == "positive"
        assert score == pytest.approx(1 / 3)

    def test_neutral_without_markers(self):
        assert analyze_sentiment(["widget"]) == (0.0, "neutral")

    @pytest.mark.parametrize("text,content_type,intents", [
        ("How to learn this: a complete guide", "informational", ["educate"]),
        ("Buy now at a discount price", "commercial", ["sell"]),
        ("", "informational", []),
    ])
    def test_content_type(self, text, content_type, intents):
        assert classify_content_type(text) == (content_type, intents)


class TestExtractEntities:
    """Capitalized runs are classified by shape and context."""

    def test_people_and_locations(self):
        entities = extract_entities("We met John Smith in Paris yesterday.")
        assert entities.people == ["John Smith"]
        assert entities.locations == ["Paris"]
        assert "Paris" not in entities.products

    def test_sentence_initial_words_are_skipped(self):
        entities = extract_entities("Today was fine. Tomorrow too.")
        assert entities.total == 0

    def test_organizations(self):
        entities = extract_entities("They hired Acme Corp last year.")
        assert entities.organizations == ["Acme Corp"]
        assert entities.people == []


class TestAIReadability:
    """Passive voice, jargon, transitions and the combined score."""

    def test_passive_voice_share_of_sentences(self):
        text = "The page was updated yesterday. We wrote it. The code is written in Python. Readers like it."
        assert passive_voice_percentage(text) == 50
        assert passive_voice_percentage("") == 0

    def test_jargon_density(self):
        # internationalization counts as long and as -ization, plus API and methodology
        assert jargon_density("The API supports internationalization and methodology.") == 80
        assert jargon_density("") == 0

    def test_transition_words(self):
        text = "However, it works. For example, caching helps. As a result, pages load faster."
        assert count_transition_words(text) == 3

    @pytest.mark.parametrize("length, expected", [(15, "simple"), (20, "moderate"), (30, "complex")])
    def test_sentence_complexity(self, length, expected):
        assert classify_sentence_complexity(length) == expected

    def test_score_for_clear_text(self):
        score = ai_readability_score(
            readability=60, passive_voice=0, jargon=0, sentence_complexity="simple",
            information=10, has_clear_structure=True, transition_words=2, word_count=100,
        )
        assert score == 98

    def test_score_for_dense_text(self):
        score = ai_readability_score(
            readability=None, passive_voice=40, jargon=20, sentence_complexity="complex",
            information=0, has_clear_structure=False, transition_words=0, word_count=100,
        )
        assert score == 10

    def test_readability_points_are_capped(self):
        score = ai_readability_score(
            readability=120, passive_voice=40, jargon=20, sentence_complexity="complex",
            information=0, has_clear_structure=False, transition_words=0, word_count=100,
        )
        assert score == 40

    def test_passive_text_reports_issue(self):
        analysis = analyze_content("The report was written by experts. The data was collected last year.")
        assert analysis.passive_voice_percentage == 100
        assert any(issue.startswith("High passive voice usage (100%)") for issue in analysis.issues)

    def test_empty_text_has_no_readability_findings(self):
        analysis = analyze_content("")
        assert "Excellent active voice usage" not in analysis.strengths
        assert not any("AI readability" in issue for issue in analysis.issues)

    def test_structure_from_html(self):
        html = "<h2>Guide</h2><ul><li>Step</li></ul>" + "".join(f"<p>Part {i}.</p>" for i in range(4))
        assert analyze_content("", html=html).has_clear_structure is True
        assert analyze_content("", html="<p>One.</p><p>Two.</p>").has_clear_structure is False
        assert analyze_content("Plain text.").has_clear_structure is False


class TestAnalyzeContent:
    def test_stuffed_text(self):
        analysis = analyze_content("Widgets widgets widgets. Buy widgets.")
        assert analysis.keyword_stuffing_risk == "high"
        assert any(issue.startswith("Keyword stuffing detected") for issue in analysis.issues)
        assert any(gap.startswith("Short content") for gap in analysis.content_gaps)

    def test_natural_text(self):
        text = " ".join(f"term{i:03d}" for i in range(40))
        analysis = analyze_content(text)
        assert analysis.keyword_stuffing_risk == "none"
        assert "Natural keyword usage without stuffing" in analysis.strengths

    def test_html_only_input(self):
        analysis = analyze_content("", html="<html><body><p>Great guide</p><p>Useful tips</p></body></html>")
        assert analysis.word_count == 4
        assert analysis.sentiment_label == "positive"

    def test_to_dict_is_plain_data(self):
        data = analyze_content("Researchers at Stanford University published a study.").to_dict()
        assert isinstance(data["entities"], dict)
        assert isinstance(data["primary_keywords"][0], dict)
        assert data["main_topic"] == "Science"
