"""robots.txt rule evaluation for AI crawlers."""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

# Crawler key -> user-agent tokens that identify it (any match counts)
AI_CRAWLERS: dict[str, tuple[str, ...]] = {
    "gptbot": ("GPTBot",),
    "claude": ("Claude-Web", "ClaudeBot"),
    "perplexity": ("PerplexityBot",),
    "google_extended": ("Google-Extended",),
    "anthropic_ai": ("anthropic-ai",),
    "cohere_ai": ("cohere-ai",),
    "ccbot": ("CCBot",),
}

ALLOW = "allow"
DISALLOW = "disallow"
UNSPECIFIED = "unspecified"


@dataclass
class RobotsGroup:
    agents: list[str]
    rules: list[tuple[str, str]]


@dataclass(frozen=True)
class CrawlerAccess:
    """Access decision for one crawler.

    Attributes:
        status: 'allow', 'disallow' or 'unspecified'
        explicit: True when a group names the agent directly (not via '*')
    """
    status: str
    explicit: bool


def parse_robots_txt(text: str) -> list[RobotsGroup]:
    groups: list[RobotsGroup] = []
    current_agents: list[str] = []
    current_rules: list[tuple[str, str]] = []

    def _flush():
        if current_agents or current_rules:
            groups.append(RobotsGroup(current_agents[:], current_rules[:]))
            current_agents.clear()
            current_rules.clear()

    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        if ":" not in line:
            continue
        key, value = [part.strip() for part in line.split(":", 1)]
        key_lower = key.lower()
        if key_lower == "user-agent":
            if current_rules:
                _flush()
            current_agents.append(value.lower())
        elif key_lower in {"allow", "disallow"}:
            current_rules.append((key_lower, value))
    _flush()
    return groups


def sitemap_urls(text: str) -> list[str]:
    """Return Sitemap directive targets in file order."""
    urls = []
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if line.lower().startswith("sitemap:"):
            urls.append(line.split(":", 1)[1].strip())
    return urls


def select_group(groups: Iterable[RobotsGroup], agent: str) -> tuple[list[RobotsGroup], bool]:
    """Pick the groups that apply to ``agent``.

    Returns:
        (groups, explicit) where explicit is False for the '*' fallback
    """
    groups = list(groups)
    agent = agent.lower()
    matched = [group for group in groups if agent in group.agents]
    if matched:
        return matched, True
    return [group for group in groups if "*" in group.agents], False


@lru_cache(maxsize=256)
def rule_pattern(rule_path: str) -> re.Pattern:
    """Compile a rule path: '*' matches any run of characters, a trailing '$' anchors the end."""
    anchored = rule_path.endswith("$")
    body = rule_path[:-1] if anchored else rule_path
    regex = ".*".join(re.escape(part) for part in body.split("*"))
    return re.compile(regex + ("$" if anchored else ""))


def evaluate_group(groups: Iterable[RobotsGroup], path: str) -> str:
    """Longest-match evaluation of allow/disallow rules for ``path``.

    Matches are ranked by the length of the rule as written; allow wins ties.
    """
    best_rule = None
    best_length = -1
    for group in groups:
        for rule_type, rule_path in group.rules:
            if rule_path == "":
                if rule_type == "disallow" and best_length < 0:
                    best_rule = ALLOW
                    best_length = 0
                continue
            if rule_pattern(rule_path).match(path):
                rule_length = len(rule_path)
                if rule_length > best_length:
                    best_length = rule_length
                    best_rule = rule_type
                elif rule_length == best_length and rule_type == ALLOW:
                    best_rule = rule_type
    if best_rule == ALLOW:
        return ALLOW
    if best_rule == DISALLOW:
        return DISALLOW
    return UNSPECIFIED


def crawler_access(robots_txt: str | None, path: str = "/") -> dict[str, CrawlerAccess]:
    """Evaluate every known AI crawler against a robots.txt body.

    For crawlers with several user-agent tokens the most permissive
    explicit decision wins. A group naming the crawler with no rule matching
    ``path`` allows it.
    """
    groups = parse_robots_txt(robots_txt) if robots_txt else []
    result: dict[str, CrawlerAccess] = {}
    for key, agents in AI_CRAWLERS.items():
        decisions = []
        for agent in agents:
            matched, explicit = select_group(groups, agent)
            status = evaluate_group(matched, path) if matched else UNSPECIFIED
            if explicit and matched and status == UNSPECIFIED:
                status = ALLOW
            decisions.append(CrawlerAccess(status=status, explicit=explicit and bool(matched)))
        result[key] = max(decisions, key=_access_rank)
    return result


def _access_rank(access: CrawlerAccess) -> int:
    if access.status == ALLOW:
        return 3 if access.explicit else 2
    if access.status == UNSPECIFIED:
        return 1
    return 0
