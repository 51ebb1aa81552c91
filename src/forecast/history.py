"""Audit score history and comparison with the previous audit."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from src.errors import ParseError

if TYPE_CHECKING:
    from src.scoring.auditor import AuditResult

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | datetime) -> datetime:
    """ISO-8601 string or datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: datetime
    overall_score: float
    category_scores: Mapping[str, float] = field(default_factory=dict)
    url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HistoryEntry:
        scores = data.get("category_scores") or {}
        if isinstance(scores, list):
            # AuditResult.to_dict() layout
            scores = {item["category"]: item["score"] for item in scores}
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            overall_score=float(data["overall_score"]),
            category_scores={str(k): float(v) for k, v in scores.items()},
            url=str(data.get("url", "")),
        )

    @classmethod
    def from_audit(cls, result: AuditResult) -> HistoryEntry:
        return cls(
            timestamp=parse_timestamp(result.timestamp),
            overall_score=result.overall_score,
            category_scores={s.category.value: s.score for s in result.category_scores},
            url=result.url,
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "overall_score": self.overall_score,
            "category_scores": dict(self.category_scores),
            "url": self.url,
        }


class ScoreHistory:
    """Append-only sequence of audit scores for one subject."""

    def __init__(self, entries: Iterable[HistoryEntry] = ()):
        self._entries: list[HistoryEntry] = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.ordered())

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def ordered(self) -> list[HistoryEntry]:
        """Entries sorted by timestamp ascending (stable for equal timestamps)."""
        return sorted(self._entries, key=lambda e: e.timestamp)

    def scores(self) -> list[float]:
        return [e.overall_score for e in self.ordered()]

    def latest(self) -> HistoryEntry | None:
        ordered = self.ordered()
        return ordered[-1] if ordered else None

    def previous(self) -> HistoryEntry | None:
        ordered = self.ordered()
        return ordered[-2] if len(ordered) >= 2 else None

    def for_url(self, url: str) -> ScoreHistory:
        return ScoreHistory(e for e in self._entries if e.url == url)

    @classmethod
    def from_results(cls, results: Iterable[AuditResult]) -> ScoreHistory:
        return cls(HistoryEntry.from_audit(r) for r in results)

    def stats(self) -> dict:
        """Summary statistics over all entries."""
        scores = self.scores()
        if not scores:
            return {
                "total_audits": 0,
                "unique_urls": 0,
                "average_score": 0.0,
                "highest_score": 0.0,
                "lowest_score": 0.0,
                "last_audit": None,
            }
        return {
            "total_audits": len(scores),
            "unique_urls": len({e.url for e in self._entries if e.url}),
            "average_score": round(sum(scores) / len(scores), 3),
            "highest_score": max(scores),
            "lowest_score": min(scores),
            "last_audit": self.latest().timestamp.isoformat(),
        }

    def to_list(self) -> list[dict]:
        return [e.to_dict() for e in self.ordered()]


def load_history(path: str | Path) -> ScoreHistory:
    """Read a history file.

    Accepts a JSON list of entries or an object with an ``entries`` list.

    Raises:
        ParseError: unreadable file or malformed entries
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ParseError(f"Could not read history file {path}: {exc}") from exc

    items = raw.get("entries", []) if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        raise ParseError(f"History file {path} must contain a list of entries")
    try:
        entries = [HistoryEntry.from_dict(item) for item in items]
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError(f"Malformed history entry in {path}: {exc}") from exc
    logger.debug("Loaded %d history entries from %s", len(entries), path)
    return ScoreHistory(entries)


@dataclass
class HistoryComparison:
    previous: HistoryEntry | None
    overall_change: float | None
    changes: dict[str, float] = field(default_factory=dict)
    insights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "previous": self.previous.to_dict() if self.previous else None,
            "overall_change": self.overall_change,
            "changes": dict(self.changes),
            "insights": list(self.insights),
        }


def compare_with_previous(current: HistoryEntry, previous: HistoryEntry | None) -> HistoryComparison:
    """Per-category deltas between two audits.

    Categories missing from the previous audit are compared against 0.
    """
    if previous is None:
        return HistoryComparison(previous=None, overall_change=None)

    overall_change = round(current.overall_score - previous.overall_score, 3)
    changes = {
        category: round(score - previous.category_scores.get(category, 0.0), 2)
        for category, score in current.category_scores.items()
    }
    return HistoryComparison(
        previous=previous,
        overall_change=overall_change,
        changes=changes,
        insights=get_comparison_insights(overall_change, changes),
    )


def get_comparison_insights(overall_change: float, changes: Mapping[str, float]) -> list[str]:
    """
    Generate insights from a comparison.

    Returns:
        List of insight strings
    """
    insights = []
    if overall_change > 0:
        insights.append(f"Overall score improved by {overall_change:.1f} points since the previous audit")
    elif overall_change < 0:
        insights.append(f"Overall score dropped by {abs(overall_change):.1f} points since the previous audit")
    else:
        insights.append("Overall score unchanged since the previous audit")

    if changes:
        best = max(changes, key=changes.get)
        worst = min(changes, key=changes.get)
        if changes[best] > 0:
            insights.append(f"Biggest gain: {best} (+{changes[best]:.1f})")
        if changes[worst] < 0:
            insights.append(f"Biggest drop: {worst} ({changes[worst]:.1f})")
        big_moves = [c for c, delta in changes.items() if abs(delta) > 20]
        if big_moves:
            insights.append(f"Significant change (>20 points) in: {', '.join(sorted(big_moves))}")
    return insights
