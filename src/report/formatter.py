"""Report formatting utilities."""
from __future__ import annotations

import json
from typing import Literal

OutputFormat = Literal["cli", "json", "markdown"]
OUTPUT_FORMATS = ("cli", "json", "markdown")

_GRADE_COLORS = {"A+": "green", "A": "green", "B": "blue", "C": "yellow", "D": "red", "F": "red bold"}
_PRIORITY_COLORS = {"critical": "red", "high": "yellow", "medium": "blue", "low": "dim"}
_CRAWLER_STATUS = {
    "allowed": ("[green]✓ allowed[/green]", "✅"),
    "implicit": ("[yellow]? not specified (allowed)[/yellow]", "❓"),
    "blocked": ("[red]✗ blocked[/red]", "❌"),
}
_MAX_FINDINGS = 5


def format_report(results: dict, output: OutputFormat = "cli") -> str:
    """Format audit results for output.

    Args:
        results: ``AuditResult.to_dict()`` output
        output: Output format - 'cli', 'json', or 'markdown'

    Returns:
        Formatted string representation of results
    """
    if output == "json":
        return _format_json(results)
    elif output == "markdown":
        return _format_markdown(results)
    else:
        return _format_cli(results)


def format_forecast(report: dict, output: OutputFormat = "cli") -> str:
    """Format ``ForecastReport.to_dict()`` output."""
    if output == "json":
        return _format_json(report)
    elif output == "markdown":
        return _format_forecast_markdown(report)
    else:
        return _format_forecast_cli(report)


def format_content(analysis: dict, output: OutputFormat = "cli") -> str:
    """Format ``ContentAnalysis.to_dict()`` output."""
    if output == "json":
        return _format_json(analysis)
    elif output == "markdown":
        return _format_content_markdown(analysis)
    else:
        return _format_content_cli(analysis)


def _format_json(results: dict) -> str:
    """Format results as JSON."""
    return json.dumps(results, ensure_ascii=False, indent=2, default=str)


def _bar(score: float, width: int = 20) -> str:
    filled = int(width * max(0.0, min(100.0, score)) / 100)
    if score >= 75:
        color = "green"
    elif score >= 50:
        color = "yellow"
    else:
        color = "red"
    return f"[{color}]{'█' * filled}{'░' * (width - filled)}[/{color}]"


def _issues(category: dict) -> list[str]:
    return [f["message"] for f in category.get("findings", []) if f.get("severity") == "issue"]


def _strengths(category: dict) -> list[str]:
    return [f["message"] for f in category.get("findings", []) if f.get("severity") == "strength"]


def _crawlers(results: dict) -> dict:
    for category in results.get("category_scores", []):
        if category.get("category") == "ai_crawlers":
            return category.get("details", {}).get("crawlers", {})
    return {}


def _format_cli(results: dict) -> str:
    """Format results for terminal display with Rich-compatible markup."""
    lines = []
    url = results.get("url", "") or "document"
    if len(url) > 60:
        url = url[:57] + "..."
    lines.append("[bold cyan]GEO Score Report[/bold cyan]")
    lines.append(f"[dim]Page:[/dim] {url}")
    lines.append("")

    grade = results.get("grade", "N/A")
    grade_color = _GRADE_COLORS.get(grade, "white")
    lines.append(
        f"[bold]GEO Score:[/bold] [{grade_color}]{results.get('display_score', 0)}/100 "
        f"({grade} - {results.get('grade_label', '')})[/{grade_color}]"
    )
    rollup = results.get("rollup", {})
    if rollup:
        lines.append("[dim]" + "  ".join(f"{k}: {v:.1f}" for k, v in rollup.items()) + "[/dim]")
    lines.append("")

    lines.append("[bold]Score Breakdown:[/bold]")
    for category in results.get("category_scores", []):
        score = category.get("score", 0)
        lines.append(f"  {category.get('name', ''):24} {_bar(score)} {score:.0f}/100")
    lines.append("")

    advanced = results.get("advanced_scores", [])
    if advanced:
        lines.append("[bold]Advanced Audits:[/bold] [dim](not weighted)[/dim]")
        for category in advanced:
            score = category.get("score", 0)
            estimated = " [dim](estimated)[/dim]" if category.get("details", {}).get("estimated") else ""
            lines.append(f"  {category.get('name', ''):24} {_bar(score)} {score:.0f}/100{estimated}")
        lines.append("")

    crawlers = _crawlers(results)
    if crawlers:
        lines.append("[bold]AI Crawler Access:[/bold]")
        for name, status in crawlers.items():
            display = _CRAWLER_STATUS.get(status, (status, ""))[0]
            lines.append(f"  {name:18} {display}")
        lines.append("")

    issues = [(c.get("name", ""), msg) for c in results.get("category_scores", []) for msg in _issues(c)]
    if issues:
        lines.append("[bold red]Issues:[/bold red]")
        for name, msg in issues[:15]:
            lines.append(f"  [red]✗[/red] [dim]{name}:[/dim] {msg}")
        if len(issues) > 15:
            lines.append(f"  [dim]... and {len(issues) - 15} more[/dim]")
        lines.append("")

    insights = results.get("insights", [])
    if insights:
        lines.append("[bold]Insights:[/bold]")
        for insight in insights:
            lines.append(f"  • {insight}")
        lines.append("")

    recommendations = results.get("recommendations", [])
    if recommendations:
        lines.append("[bold]Recommended Fixes:[/bold]")
        for i, rec in enumerate(recommendations[:10], 1):
            priority = rec.get("priority", "medium")
            color = _PRIORITY_COLORS.get(priority, "white")
            lines.append(
                f"  {i}. [{color}][{priority}][/{color}] {rec.get('title', '')} "
                f"[dim]({rec.get('effort', '')})[/dim]"
            )
        lines.append("")

    lines.append(f"[dim]Recommendations source: {results.get('recommendation_source', 'rules')}[/dim]")
    for note in results.get("notes", []):
        lines.append(f"[dim]{note}[/dim]")
    return "\n".join(lines)


def _format_markdown(results: dict) -> str:
    """Format results as Markdown."""
    lines = []
    lines.append("# GEO Score Report")
    lines.append("")
    if results.get("url"):
        lines.append(f"**URL:** {results['url']}")
    lines.append(f"**Audited:** {results.get('timestamp', '')}")
    lines.append("")

    lines.append("## GEO Score")
    lines.append("")
    lines.append(
        f"**{results.get('display_score', 0)}/100** "
        f"({results.get('grade', 'N/A')} - {results.get('grade_label', '')})"
    )
    lines.append("")
    rollup = results.get("rollup", {})
    if rollup:
        lines.append(" | ".join(f"{k.capitalize()}: {v:.1f}" for k, v in rollup.items()))
        lines.append("")

    lines.append("### Score Breakdown")
    lines.append("")
    lines.append("| Category | Score | Issues |")
    lines.append("|----------|-------|--------|")
    for category in results.get("category_scores", []):
        lines.append(f"| {category.get('name', '')} | {category.get('score', 0):.1f} | {len(_issues(category))} |")
    lines.append("")

    advanced = results.get("advanced_scores", [])
    if advanced:
        lines.append("### Advanced Audits")
        lines.append("")
        lines.append("| Audit | Score |")
        lines.append("|-------|-------|")
        for category in advanced:
            suffix = " (estimated)" if category.get("details", {}).get("estimated") else ""
            lines.append(f"| {category.get('name', '')} | {category.get('score', 0):.1f}{suffix} |")
        lines.append("")

    crawlers = _crawlers(results)
    if crawlers:
        lines.append("## AI Crawler Access")
        lines.append("")
        lines.append("| Crawler | Status |")
        lines.append("|---------|--------|")
        for name, status in crawlers.items():
            emoji = _CRAWLER_STATUS.get(status, ("", "❓"))[1]
            lines.append(f"| {name} | {emoji} {status} |")
        lines.append("")

    findings = [c for c in results.get("category_scores", []) if c.get("findings")]
    if findings:
        lines.append("## Issues & Findings")
        lines.append("")
        for category in findings:
            issues = _issues(category)
            strengths = _strengths(category)
            if not issues and not strengths:
                continue
            lines.append(f"### {category.get('name', '')}")
            lines.append("")
            for msg in issues[:_MAX_FINDINGS]:
                lines.append(f"- ❌ {msg}")
            for msg in strengths[:_MAX_FINDINGS]:
                lines.append(f"- ✅ {msg}")
            lines.append("")

    insights = results.get("insights", [])
    if insights:
        lines.append("## Insights")
        lines.append("")
        for insight in insights:
            lines.append(f"- {insight}")
        lines.append("")

    recommendations = results.get("recommendations", [])
    if recommendations:
        lines.append("## Recommended Fixes")
        lines.append("")
        for i, rec in enumerate(recommendations, 1):
            lines.append(
                f"{i}. **[{rec.get('priority', '').upper()}]** {rec.get('title', '')} "
                f"_({rec.get('effort', '')}, {rec.get('estimated_time', '')})_"
            )
            if rec.get("description"):
                lines.append(f"   {rec['description']}")
        lines.append("")

    lines.append(f"_Recommendations source: {results.get('recommendation_source', 'rules')}_")
    return "\n".join(lines)


def _format_forecast_cli(report: dict) -> str:
    lines = ["[bold cyan]GEO Score Forecast[/bold cyan]", ""]
    lines.append(f"[dim]Data points:[/dim] {report.get('data_points', 0)}")
    if report.get("current_score") is not None:
        lines.append(f"[dim]Current score:[/dim] {report['current_score']:.1f}")

    if report.get("status") != "ok":
        lines.append("")
        lines.append(f"[yellow]Insufficient data:[/yellow] {report.get('message', '')}")
    else:
        trend = report.get("trend", 0.0)
        color = "green" if trend > 0 else "red" if trend < 0 else "white"
        lines.append(f"[dim]Trend:[/dim] [{color}]{trend:+.2f} points per audit[/{color}]")
        lines.append("")
        lines.append("[bold]Forecasts:[/bold]")
        for forecast in report.get("forecasts", []):
            rng = forecast.get("range", {})
            lines.append(
                f"  {forecast['horizon_days']:>3}d  {forecast['predicted_score']:6.1f}  "
                f"[dim]({rng.get('min', 0):.1f}-{rng.get('max', 0):.1f}, "
                f"{forecast['confidence']:.0f}% confidence)[/dim]"
            )

    scenarios = report.get("scenarios", [])
    if scenarios:
        lines.append("")
        lines.append("[bold]What-if Scenarios:[/bold]")
        for scenario in scenarios:
            lines.append(
                f"  [green]+{scenario['estimated_impact']:.1f}[/green] {scenario['scenario']} "
                f"[dim]({scenario['probability']}%, {scenario['time_to_effect']})[/dim]"
            )

    insights = report.get("insights", [])
    if insights:
        lines.append("")
        lines.append("[bold]Insights:[/bold]")
        for insight in insights:
            color = _PRIORITY_COLORS.get(insight.get("priority", ""), "white")
            lines.append(f"  [{color}][{insight['type']}][/{color}] {insight['title']}")
            lines.append(f"    [dim]{insight['description']}[/dim]")

    visibility = report.get("visibility", [])
    if visibility:
        lines.append("")
        lines.append("[bold]AI Visibility Outlook:[/bold] [dim](estimated)[/dim]")
        for row in visibility:
            lines.append(
                f"  {row['system']:12} {row['current']:>3} → {row['forecast_30d']:>3} / "
                f"{row['forecast_60d']:>3} / {row['forecast_90d']:>3}  [dim]{row['trend']}[/dim]"
            )
    return "\n".join(lines)


def _format_forecast_markdown(report: dict) -> str:
    lines = ["# GEO Score Forecast", ""]
    lines.append(f"**Data points:** {report.get('data_points', 0)}")
    if report.get("current_score") is not None:
        lines.append(f"**Current score:** {report['current_score']:.1f}")
    lines.append("")

    if report.get("status") != "ok":
        lines.append(f"> Insufficient data: {report.get('message', '')}")
        lines.append("")
    else:
        lines.append(f"**Trend:** {report.get('trend', 0.0):+.2f} points per audit")
        lines.append("")
        lines.append("## Forecasts")
        lines.append("")
        lines.append("| Horizon | Predicted | Range | Confidence |")
        lines.append("|---------|-----------|-------|------------|")
        for forecast in report.get("forecasts", []):
            rng = forecast.get("range", {})
            lines.append(
                f"| {forecast['horizon_days']} days | {forecast['predicted_score']:.1f} | "
                f"{rng.get('min', 0):.1f}-{rng.get('max', 0):.1f} | {forecast['confidence']:.0f}% |"
            )
        lines.append("")

    scenarios = report.get("scenarios", [])
    if scenarios:
        lines.append("## What-if Scenarios")
        lines.append("")
        for scenario in scenarios:
            lines.append(
                f"- **{scenario['scenario']}** (+{scenario['estimated_impact']:.1f}, "
                f"{scenario['probability']}% probability, {scenario['time_to_effect']})"
            )
        lines.append("")

    insights = report.get("insights", [])
    if insights:
        lines.append("## Insights")
        lines.append("")
        for insight in insights:
            lines.append(f"- **[{insight['type'].upper()}]** {insight['title']}: {insight['description']}")
        lines.append("")
    return "\n".join(lines)


def _dominant_tone(analysis: dict) -> str:
    tone = analysis.get("tone") or {}
    return max(tone, key=tone.get) if tone else "neutral"


def _format_content_cli(analysis: dict) -> str:
    lines = ["[bold cyan]Content Analysis[/bold cyan]", ""]
    lines.append(f"[dim]Words:[/dim] {analysis.get('word_count', 0)}")
    intent = ", ".join(analysis.get("content_intent", []))
    lines.append(f"[dim]Type:[/dim] {analysis.get('content_type', '')} / {intent}")
    lines.append(f"[dim]Main topic:[/dim] {analysis.get('main_topic', '')}")
    lines.append(f"[dim]Keyword stuffing risk:[/dim] {analysis.get('keyword_stuffing_risk', '')}")
    lines.append(f"[dim]AI comprehension:[/dim] {analysis.get('ai_comprehension_score', 0):.0f}/100")
    lines.append(f"[dim]AI readability:[/dim] {analysis.get('ai_readability_score', 0):.0f}/100")
    lines.append(f"[dim]Sentiment:[/dim] {analysis.get('sentiment_label', '')} ({_dominant_tone(analysis)})")

    keywords = analysis.get("primary_keywords", [])
    if keywords:
        lines.append("")
        lines.append("[bold]Primary Keywords:[/bold]")
        for kw in keywords:
            lines.append(f"  {kw['word']:20} {kw['frequency']:>4}  [dim]{kw['density']:.2f}%[/dim]")

    for title, key, mark in (
        ("Issues", "issues", "[red]✗[/red]"),
        ("Strengths", "strengths", "[green]✓[/green]"),
        ("Suggestions", "improvement_suggestions", "•"),
    ):
        items = analysis.get(key, [])
        if items:
            lines.append("")
            lines.append(f"[bold]{title}:[/bold]")
            for item in items:
                lines.append(f"  {mark} {item}")
    return "\n".join(lines)


def _format_content_markdown(analysis: dict) -> str:
    lines = ["# Content Analysis", ""]
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    for key in (
        "word_count", "content_type", "content_intent", "main_topic", "keyword_stuffing_risk",
        "vocabulary_diversity", "ai_comprehension_score", "ai_readability_score", "sentiment_label",
    ):
        value = analysis.get(key, "")
        if isinstance(value, list):
            value = ", ".join(value)
        lines.append(f"| {key.replace('_', ' ').title()} | {value} |")
    lines.append(f"| Tone | {_dominant_tone(analysis)} |")
    lines.append("")
    for title, key in (("Issues", "issues"), ("Strengths", "strengths"), ("Suggestions", "improvement_suggestions")):
        items = analysis.get(key, [])
        if items:
            lines.append(f"## {title}")
            lines.append("")
            for item in items:
                lines.append(f"- {item}")
            lines.append("")
    return "\n".join(lines)
