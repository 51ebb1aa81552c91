"""CLI commands."""
from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from src.config.log_config import configure_logging
from src.config.settings import settings
from src.errors import FetchError, ParseError
from src.fetcher.html_fetcher import fetch_page
from src.forecast.engine import ForecastEngine
from src.forecast.history import load_history
from src.nlp.content_analyzer import analyze_content
from src.parser.document import document_from_page
from src.recommend.engine import RecommendationEngine
from src.recommend.enrichment import OpenRouterEnricher
from src.report.formatter import OUTPUT_FORMATS, OutputFormat, format_content, format_forecast, format_report
from src.scoring.auditor import audit_document

VERSION = "1.0.0"
FAILING_GRADES = ("D", "F")

app = typer.Typer(
    add_completion=False,
    help="GEO Score - Audit and forecast how likely AI answer engines are to cite a page",
)
console = Console()


def _output_format(output: str) -> OutputFormat:
    if output not in OUTPUT_FORMATS:
        console.print(f"[red]Error:[/red] Invalid output format '{output}'. Use cli, json, or markdown.")
        raise typer.Exit(1)
    return output  # type: ignore[return-value]


def _emit(report: str, output_format: OutputFormat, save: str | None) -> None:
    if save:
        save_path = Path(save)
        save_path.write_text(report, encoding="utf-8")
        console.print(f"\n[green]Report saved to:[/green] {save_path}")
    else:
        console.print("")
        # JSON/Markdown must not be interpreted as Rich markup
        console.print(report, markup=output_format == "cli")


def _recommendation_engine() -> RecommendationEngine:
    if settings.enrichment.api_key:
        return RecommendationEngine(enricher=OpenRouterEnricher(settings.enrichment))
    return RecommendationEngine()


@app.command()
def run(
    target: str = typer.Argument(..., help="URL to analyze"),
    output: str = typer.Option(
        "cli",
        "--output",
        "-o",
        help="Output format: cli, json, markdown",
    ),
    save: str | None = typer.Option(
        None,
        "--save",
        "-s",
        help="Save report to file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed analysis information",
    ),
) -> None:
    """Audit a URL and print its GEO score report.

    Examples:
        geo-score run https://example.com
        geo-score run https://example.com -o json
        geo-score run https://example.com -o markdown -s report.md
    """
    output_format = _output_format(output)
    configure_logging(logging.DEBUG if verbose else None)

    console.print(Panel.fit(
        f"[bold cyan]GEO Score[/bold cyan]\n[dim]Analyzing:[/dim] {target}",
        border_style="cyan",
    ))

    try:
        with console.status("[bold blue]Fetching page...", spinner="dots"):
            page = fetch_page(target)

        if verbose:
            console.print(f"[dim]Fetched {len(page.html):,} bytes from {page.final_url}[/dim]")

        with console.status("[bold blue]Parsing content...", spinner="dots"):
            doc = document_from_page(page)

        if verbose:
            console.print(f"[dim]Parsed: {doc.word_count} words, {len(doc.headings)} headings[/dim]")

        with console.status("[bold blue]Scoring...", spinner="dots"):
            result = audit_document(doc, engine=_recommendation_engine())

    except FetchError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except ParseError as e:
        console.print(f"\n[red]Parse Error:[/red] {e}")
        raise typer.Exit(1)

    _emit(format_report(result.to_dict(), output_format), output_format, save)

    if result.grade in FAILING_GRADES:
        raise typer.Exit(1)


@app.command()
def check(
    target: str = typer.Argument(..., help="URL to quick-check"),
) -> None:
    """Quick check - returns only the GEO score and grade.

    Example:
        geo-score check https://example.com
    """
    configure_logging()
    try:
        with console.status("[bold blue]Analyzing...", spinner="dots"):
            doc = document_from_page(fetch_page(target))
            result = audit_document(doc)
    except (FetchError, ParseError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    grade_colors = {"A+": "green", "A": "green", "B": "blue", "C": "yellow", "D": "red", "F": "red"}
    color = grade_colors.get(result.grade, "white")
    console.print(f"[{color}]{result.grade}[/{color}] ({result.display_score}/100) - {target}")

    if result.grade in FAILING_GRADES:
        raise typer.Exit(1)


@app.command()
def content(
    path: Path = typer.Argument(..., help="Text or HTML file to analyze"),
    output: str = typer.Option("cli", "--output", "-o", help="Output format: cli, json, markdown"),
) -> None:
    """Run the NLP content analysis on a local text or HTML file.

    Example:
        geo-score content article.html
    """
    output_format = _output_format(output)
    configure_logging()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Could not read {path}: {e}")
        raise typer.Exit(1)

    if path.suffix.lower() in (".html", ".htm") or text.lstrip().startswith("<"):
        analysis = analyze_content("", html=text)
    else:
        analysis = analyze_content(text)
    _emit(format_content(analysis.to_dict(), output_format), output_format, None)


@app.command()
def forecast(
    history_file: Path = typer.Argument(..., help="JSON file with past audit scores"),
    output: str = typer.Option("cli", "--output", "-o", help="Output format: cli, json, markdown"),
    url: str | None = typer.Option(None, "--url", help="Only use history entries for this URL"),
    competitor: float | None = typer.Option(
        None,
        "--competitor",
        help="Competitor average score to compare the 90-day forecast against",
    ),
) -> None:
    """Forecast future GEO scores from audit history.

    Example:
        geo-score forecast history.json -o markdown
    """
    output_format = _output_format(output)
    configure_logging()
    try:
        history = load_history(history_file)
    except ParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if url:
        history = history.for_url(url)

    engine = ForecastEngine(history)
    report = engine.report()
    _emit(format_forecast(report.to_dict(), output_format), output_format, None)

    if competitor is not None and report.forecasts:
        advantage = engine.calculate_competitive_advantage(report.forecasts[-1], competitor)
        console.print(f"\n[bold]Competitive position:[/bold] {advantage.status} - {advantage.message}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]GEO Score[/bold] v{VERSION}")
    console.print("[dim]Generative Engine Optimization audit and forecasting engine[/dim]")


if __name__ == "__main__":
    app()
