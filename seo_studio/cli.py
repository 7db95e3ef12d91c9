"""Typer CLI application for SEO Content Studio.

Provides commands for keyword analysis, SERP lookup, templated content
generation, query fan-out, topic clustering and the full content pipeline.
"""

import asyncio
import logging
import os
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from seo_studio.exceptions import SEOStudioError

console = Console()
app = typer.Typer(
    name="seo-studio",
    help="SEO Content Studio -- keyword research, SERP analysis & content generation.",
    add_completion=False,
    no_args_is_help=True,
)

_STATUS_ICONS = {
    "ok": "[green]✔ OK[/green]",
    "warning": "[yellow]⚠ Warning[/yellow]",
    "error": "[red]✘ Error[/red]",
}


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context."""
    return asyncio.run(coro)


def _get_studio():
    from seo_studio.app import SEOStudio
    studio = SEOStudio()
    studio.initialize()
    return studio


def _get_workflow_engine():
    """Return a WorkflowEngine configured from config/settings.yaml."""
    return _get_studio().make_engine()


def _fail(exc: SEOStudioError) -> None:
    console.print("[red]✘[/red] " + exc.user_message)
    raise typer.Exit(code=1)


def _print_results(results: dict, title: str = "Results") -> None:
    """Pretty-print pipeline results using Rich."""
    steps = results.get("steps", {})
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Step", style="cyan", min_width=25)
    table.add_column("Status", min_width=10)
    table.add_column("Details", max_width=60)

    for step_name, step_data in steps.items():
        status = step_data.get("status", "unknown")
        if status == "success":
            status_display = "[green]✔ success[/green]"
        elif status == "error":
            status_display = "[red]✘ error[/red]"
        elif status == "skipped":
            status_display = "[yellow]○ skipped[/yellow]"
        else:
            status_display = status

        detail_parts = []
        if status == "error":
            detail_parts.append(step_data.get("error", "")[:80])
        elif status == "skipped":
            detail_parts.append(step_data.get("reason", ""))
        else:
            for key in ("count", "score", "warning"):
                if key in step_data:
                    detail_parts.append(f"{key}={step_data[key]}")
            for path in step_data.get("paths", []):
                detail_parts.append(path)
        display_name = step_name.replace("_", " ").title()
        table.add_row(display_name, status_display, "; ".join(detail_parts))

    console.print(table)
    summary = results.get("summary", "")
    if summary:
        console.print(f"\n[bold]{summary}[/bold]")


# ------------------------------------------------------------------
# analyze
# ------------------------------------------------------------------
@app.command()
def analyze(
    keyword: str = typer.Argument(..., help="Keyword to analyze."),
    country: Optional[str] = typer.Option(None, "--country", "-c", help="Two-letter country code."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language code."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Estimate volume, difficulty, CPC and intent for a keyword."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]Keyword Analysis: " + keyword + "[/bold cyan]"))

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Analyzing keyword...", total=None)
        engine = _get_workflow_engine()
        try:
            analysis = _run_async(engine.get_keyword_analysis(keyword, country, language))
        except SEOStudioError as exc:
            _fail(exc)

    table = Table(title="Metrics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", min_width=18)
    table.add_column("Value")
    table.add_row("Search volume", f"{analysis.search_volume:,}")
    table.add_row("Difficulty", str(analysis.difficulty))
    table.add_row("CPC", f"${analysis.cpc:.2f}")
    table.add_row("Competition", analysis.competition.value)
    table.add_row("Intent", analysis.intent.value)
    table.add_row("Trend", analysis.trend.value)
    table.add_row("Seasonality", analysis.seasonality)
    table.add_row("Source", analysis.source)
    console.print(table)

    if analysis.related_keywords:
        related = Table(title="Related Keywords", show_header=True, header_style="bold magenta")
        related.add_column("Keyword", style="cyan")
        related.add_column("Volume", justify="right")
        related.add_column("Difficulty", justify="right")
        related.add_column("Relevance", justify="right")
        for rk in analysis.related_keywords:
            related.add_row(rk.keyword, f"{rk.search_volume:,}", str(rk.difficulty), str(rk.relevance))
        console.print(related)

    for opportunity in analysis.opportunities:
        console.print("[green]•[/green] " + opportunity)


# ------------------------------------------------------------------
# serp
# ------------------------------------------------------------------
@app.command()
def serp(
    keyword: str = typer.Argument(..., help="Keyword to look up."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Fetch ranked search results (falls back to estimates without credentials)."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]SERP: " + keyword + "[/bold cyan]"))

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Fetching search results...", total=None)
        engine = _get_workflow_engine()
        try:
            results = _run_async(engine.get_serp_results(keyword))
        except SEOStudioError as exc:
            _fail(exc)

    last_error = engine.serp_fetcher.last_error
    if last_error is not None:
        console.print("[yellow]⚠[/yellow] " + last_error.user_message)

    table = Table(title="Results", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("URL", max_width=45)
    table.add_column("CTR", justify="right")
    table.add_column("Source")
    for result in results:
        table.add_row(
            str(result.position), result.title, result.url, f"{result.ctr:.1f}%", result.source,
        )
    console.print(table)


# ------------------------------------------------------------------
# generate
# ------------------------------------------------------------------
@app.command()
def generate(
    keyword: str = typer.Argument(..., help="Target keyword for content."),
    content_type: str = typer.Option("blog", "--type", "-t", help="Content type (service, blog, ecommerce)."),
    export: str = typer.Option("", "--export", "-e", help="Comma-separated formats to export (txt, md, html)."),
    show: bool = typer.Option(False, "--show", help="Print the generated markdown."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate, score and optionally export content for a keyword."""
    _setup_logging(verbose)
    label = keyword + " (" + content_type + ")"
    console.print(Panel("[bold cyan]Content Generation: " + label + "[/bold cyan]"))
    formats = [f.strip() for f in export.split(",") if f.strip()]

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Generating content...", total=None)
        engine = _get_workflow_engine()
        try:
            content = _run_async(engine.generate_content(keyword, content_type))
        except SEOStudioError as exc:
            _fail(exc)

    console.print(f"[bold]{content.title}[/bold]")
    console.print(
        f"SEO score: [bold]{content.score}[/bold]  words: {content.word_count}  "
        f"entities: {len(content.entities)}  FAQs: {len(content.faqs)}  source: {content.source}"
    )
    for rec in content.recommendations:
        console.print("[yellow]•[/yellow] " + rec)
    if show:
        console.print()
        console.print(content.content)

    for fmt in formats:
        try:
            path = engine.exporter.export_content(content, fmt)
        except (ValueError, OSError) as exc:
            console.print("[red]✘[/red] Export " + fmt + " failed: " + str(exc))
            continue
        console.print("[green]✔[/green] Exported " + path)


# ------------------------------------------------------------------
# fanout
# ------------------------------------------------------------------
@app.command()
def fanout(
    keyword: str = typer.Argument(..., help="Seed keyword."),
    csv_path: str = typer.Option("", "--csv", help="Write the queries to this CSV file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Expand a keyword into buyer-journey queries."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]Query Fan-Out: " + keyword + "[/bold cyan]"))

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Expanding queries...", total=None)
        engine = _get_workflow_engine()
        try:
            queries = _run_async(engine.generate_fan_out(keyword))
        except SEOStudioError as exc:
            _fail(exc)

    table = Table(title=f"{len(queries)} queries", show_header=True, header_style="bold magenta")
    table.add_column("Query", style="cyan", max_width=50)
    table.add_column("Stage")
    table.add_column("Volume", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Intent")
    for q in queries:
        table.add_row(q.query, q.stage.value, f"{q.search_volume:,}", str(q.difficulty), q.intent.value)
    console.print(table)

    if csv_path:
        path = engine.exporter.export_queries_csv(queries, csv_path)
        console.print("[green]✔[/green] CSV written to " + path)


# ------------------------------------------------------------------
# cluster
# ------------------------------------------------------------------
@app.command()
def cluster(
    topic: str = typer.Argument("", help="Main topic to cluster."),
    intent: Optional[str] = typer.Option(
        None, "--intent", "-i", help="informational, commercial or transactional (default: from SERP).",
    ),
    samples: bool = typer.Option(False, "--samples", help="Cluster the built-in sample topics instead."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Build a topic cluster of subtopics and supporting keywords."""
    _setup_logging(verbose)
    if not topic and not samples:
        console.print("[yellow]Provide a topic or use --samples[/yellow]")
        raise typer.Exit(code=1)

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Clustering topics...", total=None)
        engine = _get_workflow_engine()
        try:
            if samples:
                clusters = _run_async(engine.sample_clusters())
            else:
                clusters = [_run_async(engine.generate_cluster(topic, intent))]
        except SEOStudioError as exc:
            _fail(exc)

    for item in clusters:
        console.print(Panel(
            f"[bold cyan]{item.main_topic}[/bold cyan]\n"
            f"intent: {item.intent.value}  volume: {item.search_volume:,}  "
            f"difficulty: {item.difficulty}  relevance: {item.semantic_relevance}  source: {item.source}"
        ))
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Subtopic", style="cyan", max_width=50)
        table.add_column("Keyword", max_width=50)
        for index in range(max(len(item.subtopics), len(item.keywords))):
            table.add_row(
                item.subtopics[index] if index < len(item.subtopics) else "",
                item.keywords[index] if index < len(item.keywords) else "",
            )
        console.print(table)


# ------------------------------------------------------------------
# pipeline
# ------------------------------------------------------------------
@app.command()
def pipeline(
    keyword: str = typer.Argument(..., help="Target keyword."),
    content_type: str = typer.Option("blog", "--type", "-t", help="Content type (service, blog, ecommerce)."),
    export: str = typer.Option("md", "--export", "-e", help="Comma-separated formats to export (txt, md, html)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run analysis, SERP, generation, fan-out and export in one go."""
    _setup_logging(verbose)
    label = keyword + " (" + content_type + ")"
    console.print(Panel("[bold cyan]Content Pipeline: " + label + "[/bold cyan]"))
    formats = [f.strip() for f in export.split(",") if f.strip()]

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Running content pipeline...", total=None)
        engine = _get_workflow_engine()
        try:
            results = _run_async(engine.run_content_pipeline(keyword, content_type, formats))
        except SEOStudioError as exc:
            _fail(exc)

    _print_results(results, title="Content Pipeline Results")
    console.print("[green]✔[/green] Content pipeline complete.")


# ------------------------------------------------------------------
# status
# ------------------------------------------------------------------
@app.command()
def status(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show configuration, provider credentials and export directory status."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]System Status[/bold cyan]"))

    table = Table(title="Component Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", min_width=20)
    table.add_column("Status", min_width=10)
    table.add_column("Details", max_width=50)

    studio = _get_studio()
    for component, info in studio.get_status().items():
        display = _STATUS_ICONS.get(info["status"], info["status"])
        table.add_row(component.replace("_", " ").title(), display, str(info["details"]))

    env_file = ".env"
    if os.path.exists(env_file):
        table.add_row("Environment", _STATUS_ICONS["ok"], ".env found")
    else:
        table.add_row("Environment", _STATUS_ICONS["warning"], ".env not found (see .env.example)")

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
