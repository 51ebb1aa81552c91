"""Unit tests for the recommendation enrichment client."""
from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.audit.base import Category, CategoryScore, Finding, FindingSeverity
from src.config.settings import EnrichmentSettings
from src.errors import EnrichmentUnavailable
from src.recommend.enrichment import EnrichmentRequest, OpenRouterEnricher, build_request

VALID_PAYLOAD = {
    "recommendations": [{
        "category": "schema_markup",
        "priority": "high",
        "effort": "quick-win",
        "title": "Add FAQ markup",
        "description": "Mark up the FAQ section.",
    }],
    "insights": ["FAQ content is easy to cite."],
}


def _completion(content: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


@pytest.fixture
def enricher():
    return OpenRouterEnricher(EnrichmentSettings(api_key="sk-test", base_url="https://llm.example.com/v1"))


@pytest.fixture
def request_payload():
    return EnrichmentRequest(url="https://example.com/", overall_score=42.0, category_scores={"eeat": 30.0})


class TestBuildRequest:
    def test_collects_issues_and_strengths(self):
        score = CategoryScore(
            category=Category.EEAT,
            score=30,
            findings=[
                Finding(FindingSeverity.ISSUE, "No author", Category.EEAT, "author"),
                Finding(FindingSeverity.STRENGTH, "Contact page", Category.EEAT, "contact"),
            ],
        )
        request = build_request("https://example.com/", 42.0, [score])
        assert request.category_scores == {"eeat": 30}
        assert request.top_issues == ["E-E-A-T: No author"]
        assert request.top_strengths == ["E-E-A-T: Contact page"]

    def test_issue_list_is_capped(self):
        findings = [Finding(FindingSeverity.ISSUE, f"issue {i}", Category.EEAT, f"s{i}") for i in range(20)]
        request = build_request("u", 0, [CategoryScore(category=Category.EEAT, score=0, findings=findings)],
                                EnrichmentSettings(max_issues=3))
        assert len(request.top_issues) == 3


class TestOpenRouterEnricher:
    """Every failure mode surfaces as EnrichmentUnavailable."""

    def test_missing_api_key(self, request_payload):
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            OpenRouterEnricher(EnrichmentSettings(api_key="")).enrich(request_payload)
        assert exc_info.value.reason == "no_api_key"

    @patch("src.recommend.enrichment.requests.post")
    def test_valid_response(self, mock_post, enricher, request_payload):
        mock_post.return_value = _completion(json.dumps(VALID_PAYLOAD))
        result = enricher.enrich(request_payload)
        assert result.recommendations[0].category is Category.SCHEMA_MARKUP
        assert result.insights == ["FAQ content is easy to cite."]
        args, kwargs = mock_post.call_args
        assert args[0] == "https://llm.example.com/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @patch("src.recommend.enrichment.requests.post")
    def test_code_fenced_json(self, mock_post, enricher, request_payload):
        mock_post.return_value = _completion("```json\n" + json.dumps(VALID_PAYLOAD) + "\n```")
        result = enricher.enrich(request_payload)
        assert result.to_recommendations()[0].title == "Add FAQ markup"

    @patch("src.recommend.enrichment.requests.post")
    def test_empty_recommendations_are_valid(self, mock_post, enricher, request_payload):
        mock_post.return_value = _completion('{"recommendations": [], "insights": []}')
        assert enricher.enrich(request_payload).recommendations == []

    @patch("src.recommend.enrichment.requests.post")
    def test_timeout(self, mock_post, enricher, request_payload):
        mock_post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            enricher.enrich(request_payload)
        assert exc_info.value.reason == "timeout"

    @patch("src.recommend.enrichment.requests.post")
    def test_connection_error(self, mock_post, enricher, request_payload):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            enricher.enrich(request_payload)
        assert exc_info.value.reason == "transport"

    @patch("src.recommend.enrichment.requests.post")
    def test_non_2xx_status(self, mock_post, enricher, request_payload):
        mock_post.return_value = _completion("{}", status_code=429)
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            enricher.enrich(request_payload)
        assert exc_info.value.reason == "http_status"

    @pytest.mark.parametrize("content", [
        "not json at all",
        '{"recommendations": [{"category": "nonsense", "priority": "high", "effort": "quick-win", '
        '"title": "x", "description": "y"}]}',
        '{"recommendations": [{"category": "eeat", "priority": "someday", "effort": "quick-win", '
        '"title": "x", "description": "y"}]}',
    ])
    @patch("src.recommend.enrichment.requests.post")
    def test_malformed_payload(self, mock_post, content, enricher, request_payload):
        mock_post.return_value = _completion(content)
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            enricher.enrich(request_payload)
        assert exc_info.value.reason == "malformed"

    @patch("src.recommend.enrichment.requests.post")
    def test_missing_choices(self, mock_post, enricher, request_payload):
        response = MagicMock(status_code=200)
        response.json.return_value = {"error": "oops"}
        mock_post.return_value = response
        with pytest.raises(EnrichmentUnavailable) as exc_info:
            enricher.enrich(request_payload)
        assert exc_info.value.reason == "malformed"
