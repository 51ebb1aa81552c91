"""Recommendation value type shared by the rule engine and the enrichment client."""
from __future__ import annotations

from dataclasses import asdict, dataclass

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}
EFFORT_ORDER = {"quick-win": 0, "strategic": 1, "long-term": 2}

SOURCE_RULES = "rules"
SOURCE_ENRICHED = "enriched"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class Recommendation:
    category: str
    priority: str
    effort: str
    title: str
    description: str
    impact: str = ""
    implementation: str = ""
    estimated_time: str = ""

    def sort_key(self) -> tuple:
        return (
            PRIORITY_ORDER.get(self.priority, len(PRIORITY_ORDER)),
            EFFORT_ORDER.get(self.effort, len(EFFORT_ORDER)),
            self.category,
            self.title,
        )

    def to_dict(self) -> dict:
        return asdict(self)
