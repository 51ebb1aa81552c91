"""Unit tests for score history loading and comparison."""
from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from src.errors import ParseError
from src.forecast.history import (
    HistoryEntry,
    ScoreHistory,
    compare_with_previous,
    get_comparison_insights,
    load_history,
    parse_timestamp,
)


def _entry(day: int, score: float, url: str = "https://example.com/", **scores) -> HistoryEntry:
    return HistoryEntry(
        timestamp=datetime(2024, 1, day, tzinfo=timezone.utc),
        overall_score=score,
        category_scores=scores,
        url=url,
    )


class TestParseTimestamp:
    def test_zulu_suffix(self):
        assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-02T00:00:00").tzinfo == timezone.utc

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestHistoryEntry:
    def test_from_audit_dict_layout(self):
        """category_scores as a list of objects, as written by AuditResult.to_dict()."""
        entry = HistoryEntry.from_dict({
            "timestamp": "2024-01-01T00:00:00+00:00",
            "overall_score": 55,
            "url": "https://example.com/",
            "category_scores": [{"category": "eeat", "score": 40}, {"category": "structure", "score": 90}],
        })
        assert entry.category_scores == {"eeat": 40.0, "structure": 90.0}
        assert entry.overall_score == 55.0

    def test_round_trip(self):
        entry = _entry(3, 61.5, eeat=40.0)
        assert HistoryEntry.from_dict(entry.to_dict()) == entry


class TestScoreHistory:
    """Ordering and summary statistics."""

    def test_ordered_by_timestamp(self):
        history = ScoreHistory([_entry(5, 70), _entry(1, 50), _entry(3, 60)])
        assert history.scores() == [50, 60, 70]
        assert history.latest().overall_score == 70
        assert history.previous().overall_score == 60

    def test_append(self):
        history = ScoreHistory([_entry(1, 50)])
        history.append(_entry(2, 55))
        assert len(history) == 2
        assert history.previous().overall_score == 50

    def test_for_url(self):
        history = ScoreHistory([_entry(1, 50, url="https://a.test/"), _entry(2, 80, url="https://b.test/")])
        assert history.for_url("https://b.test/").scores() == [80]

    def test_stats(self):
        history = ScoreHistory([_entry(1, 50, url="https://a.test/"), _entry(2, 70, url="https://b.test/"),
                                _entry(3, 60, url="https://a.test/")])
        stats = history.stats()
        assert stats["total_audits"] == 3
        assert stats["unique_urls"] == 2
        assert stats["average_score"] == 60
        assert stats["highest_score"] == 70
        assert stats["lowest_score"] == 50
        assert stats["last_audit"] == "2024-01-03T00:00:00+00:00"

    def test_empty_stats(self):
        stats = ScoreHistory().stats()
        assert stats["total_audits"] == 0
        assert stats["last_audit"] is None
        assert ScoreHistory().latest() is None


class TestLoadHistory:
    """History files are JSON lists or objects with an entries list."""

    def test_list_file(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps([
            {"timestamp": "2024-01-02T00:00:00Z", "overall_score": 60},
            {"timestamp": "2024-01-01T00:00:00Z", "overall_score": 50},
        ]))
        assert load_history(path).scores() == [50, 60]

    def test_entries_object(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"entries": [{"timestamp": "2024-01-01T00:00:00Z", "overall_score": 42}]}))
        assert len(load_history(path)) == 1

    @pytest.mark.parametrize("content", [
        "{not json",
        '{"entries": "nope"}',
        '[{"timestamp": "2024-01-01T00:00:00Z"}]',
        '[{"timestamp": "sometime", "overall_score": 50}]',
    ])
    def test_malformed(self, tmp_path, content):
        path = tmp_path / "history.json"
        path.write_text(content)
        with pytest.raises(ParseError):
            load_history(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError):
            load_history(tmp_path / "missing.json")


class TestCompareWithPrevious:
    def test_no_previous(self):
        comparison = compare_with_previous(_entry(2, 60), None)
        assert comparison.overall_change is None
        assert comparison.insights == []

    def test_deltas(self):
        """Categories missing from the previous audit compare against zero."""
        previous = _entry(1, 40, schema_markup=20)
        current = _entry(2, 55.5, schema_markup=50, eeat=80)
        comparison = compare_with_previous(current, previous)
        assert comparison.overall_change == 15.5
        assert comparison.changes == {"schema_markup": 30, "eeat": 80}
        assert comparison.insights == [
            "Overall score improved by 15.5 points since the previous audit",
            "Biggest gain: eeat (+80.0)",
            "Significant change (>20 points) in: eeat, schema_markup",
        ]
        assert comparison.to_dict()["previous"]["overall_score"] == 40

    def test_drop_insights(self):
        insights = get_comparison_insights(-3.25, {"eeat": -5, "structure": 0})
        assert insights == [
            "Overall score dropped by 3.2 points since the previous audit",
            "Biggest drop: eeat (-5.0)",
        ]

    def test_unchanged(self):
        assert get_comparison_insights(0, {}) == ["Overall score unchanged since the previous audit"]
