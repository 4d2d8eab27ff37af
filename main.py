#!/usr/bin/env python3
"""InsightSnap - CLI Entry Point.

Sort social posts into pain points, trending ideas and content ideas.
"""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.classifier import classify_posts, score_posts
from src.classifier.engine import resolve_lexicons
from src.config import get_config, reload_config, setup_logging, validate_config
from src.models import CATEGORIES, CATEGORY_NAMES, ClassificationResult
from src.search import SearchRequest, SearchService, SearchValidationError
from src.sources import JsonFilePostSource, SourceError, sources_from_config


console = Console()


def load_posts_file(path: str) -> list:
    """Load posts from a JSON file, exiting with an error message on failure."""
    try:
        return JsonFilePostSource(path).load()
    except SourceError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _truncate(text: str, length: int = 70) -> str:
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length - 3] + "..."


def print_results(result: ClassificationResult) -> None:
    """Print the three category lists as tables."""
    for category in CATEGORIES:
        posts = result.get(category)

        table = Table(
            title=f"{CATEGORY_NAMES[category]} ({len(posts)})",
            show_header=True,
            header_style="bold magenta",
            title_justify="left",
        )
        table.add_column("#", style="dim")
        table.add_column("Platform", style="cyan")
        table.add_column("Source")
        table.add_column("Engagement", justify="right")
        table.add_column("Content")

        for i, post in enumerate(posts, 1):
            table.add_row(str(i), post.platform or "-", post.source or "-", f"{post.engagement:,}", _truncate(post.content))

        console.print(table)
        console.print()


@click.group()
@click.version_option(version="0.1.0", prog_name="insightsnap")
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def cli(config_path: str | None, verbose: bool):
    """InsightSnap - Turn social posts into content research."""
    if config_path:
        try:
            reload_config(config_path)
        except FileNotFoundError as e:
            raise click.BadParameter(str(e), param_hint="--config")
    if verbose:
        setup_logging(verbose=True)


@cli.command()
def lexicons():
    """List the keyword lexicons and their weights."""
    config = get_config()
    lexicon_map = resolve_lexicons(config.classifier)

    for category in CATEGORIES:
        table = Table(
            title=CATEGORY_NAMES[category],
            show_header=True,
            header_style="bold magenta",
            title_justify="left",
        )
        table.add_column("Weight", justify="right", style="cyan")
        table.add_column("Keywords")

        by_weight: dict[int, list[str]] = {}
        for keyword, weight in lexicon_map[category].items():
            by_weight.setdefault(weight, []).append(keyword)

        for weight in sorted(by_weight, reverse=True):
            table.add_row(str(weight), ", ".join(by_weight[weight]))

        console.print(table)
        console.print()


@cli.command()
@click.argument("posts_file", type=click.Path(dir_okay=False))
@click.option("--query", "-q", default="", help="Search query the posts came from")
@click.option("--limit", "-l", default=None, type=click.IntRange(min=1), help="Posts per category")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
def classify(posts_file: str, query: str, limit: int | None, as_json: bool):
    """Classify posts from a JSON file into the three categories."""
    posts = load_posts_file(posts_file)
    result = classify_posts(posts, query, limit=limit, config=get_config().classifier)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(Panel(
        f"[bold]{len(posts)}[/bold] posts from {posts_file}" + (f"\nQuery: {query}" if query else ""),
        title="Classification",
        border_style="cyan",
    ))
    print_results(result)

    if result.is_empty():
        console.print("[yellow]No posts found.[/yellow]")


@cli.command()
@click.argument("posts_file", type=click.Path(dir_okay=False))
@click.option("--top", "-t", default=20, type=click.IntRange(min=1), help="Number of posts to show")
def explain(posts_file: str, top: int):
    """Show per-category scores and matched keywords for each post."""
    posts = load_posts_file(posts_file)
    scored = score_posts(posts, get_config().classifier)

    if not scored:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Pain", justify="right")
    table.add_column("Trending", justify="right")
    table.add_column("Content", justify="right")
    table.add_column("Best", style="green")
    table.add_column("Matched keywords", style="dim")

    for item in scored[:top]:
        matched = "; ".join(
            f"{category}: {', '.join(item.matches[category])}"
            for category in CATEGORIES if item.matches[category]
        )
        table.add_row(
            item.post.id,
            f"{item.pain_score:.2f}",
            f"{item.trending_score:.2f}",
            f"{item.content_score:.2f}",
            item.best_category,
            matched or "-",
        )

    console.print(table)


@cli.command()
@click.argument("query")
@click.option("--platforms", "-p", default=None, help="Comma-separated platforms (reddit,x,youtube)")
@click.option("--posts", "posts_file", default=None, type=click.Path(dir_okay=False), help="JSON file of posts to search instead of configured sources")
@click.option("--time-filter", "-t", default=None, help="hour / day / week / month / year / all")
@click.option("--language", default=None, help="2-letter language code")
@click.option("--limit", "-l", default=None, type=int, help="Posts per category")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of tables")
def search(
    query: str,
    platforms: str | None,
    posts_file: str | None,
    time_filter: str | None,
    language: str | None,
    limit: int | None,
    as_json: bool,
):
    """Search the configured post sources and classify the results."""
    config = get_config()

    raw_request = {
        "query": query,
        "platforms": [p.strip() for p in platforms.split(",") if p.strip()] if platforms else None,
        "language": language,
        "timeFilter": time_filter,
        "limit": limit,
    }

    try:
        request = SearchRequest.from_dict(raw_request, config)
    except SearchValidationError as e:
        for detail in e.details:
            console.print(f"[red]Error:[/red] {detail['field']}: {detail['message']}")
        sys.exit(1)

    if posts_file:
        sources = {platform: JsonFilePostSource(posts_file, platform) for platform in request.platforms}
    else:
        sources = sources_from_config(config.search.sources)

    response = SearchService(sources, config).search(request)

    if as_json:
        click.echo(json.dumps(response.to_dict(), indent=2))
        return

    console.print(Panel(
        f"[bold]{request.query}[/bold]\nPlatforms: {', '.join(request.platforms)}",
        title="Search",
        border_style="cyan",
    ))

    for result in response.platform_results:
        if result.success:
            console.print(f"[green]✓[/green] {result.platform}: {len(result.posts)} posts")
        else:
            console.print(f"[yellow]![/yellow] {result.platform}: {result.error}")
    console.print()

    if response.total_posts == 0:
        message = response.to_dict()["metadata"]["noResultsMessage"]
        console.print(f"[yellow]{message['title']}[/yellow] - {message['message']}")
        for suggestion in message["suggestions"]:
            console.print(f"  • {suggestion}")
        return

    print_results(response.results)
    console.print(f"[dim]{response.total_posts} posts in {response.duration_ms:.0f}ms[/dim]")


@cli.command()
def check():
    """Check configuration."""
    config = get_config()

    console.print("\n[bold]InsightSnap Configuration[/bold]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    clf = config.classifier
    table.add_row("Per-category limit", str(clf.per_category_limit))
    table.add_row("Engagement damping", str(clf.engagement_damping))
    table.add_row("Question bonus", str(clf.question_bonus))
    table.add_row("Exclamation bonus", str(clf.exclamation_bonus))
    table.add_row("Emotional bonus", f"{clf.emotional_bonus} ({', '.join(clf.emotional_categories)})")
    table.add_row("Platform bonuses", ", ".join(f"{p}={b}" for p, b in clf.platform_bonuses.items()))
    table.add_row("Search timeout", f"{config.search.timeout_seconds}s")
    table.add_row("Post sources", ", ".join(f"{p}={path}" for p, path in config.search.sources.items()) or "(none)")
    console.print(table)

    errors = validate_config(config)
    if errors:
        console.print("\n[yellow]Configuration warnings:[/yellow]")
        for error in errors:
            console.print(f"  [yellow]![/yellow] {error}")
        sys.exit(1)

    console.print("\n[green]✓[/green] Configuration valid")


@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to listen on")
@click.option("--reload", "-r", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool):
    """Launch the HTTP API."""
    import uvicorn

    config = get_config()
    host = host or config.ui.host
    port = port or config.ui.port

    setup_logging(config)

    console.print(f"\n[bold]Starting InsightSnap API[/bold]\n")
    console.print(f"  URL: [cyan]http://{host}:{port}[/cyan]")
    console.print(f"  Reload: {'enabled' if reload else 'disabled'}")
    console.print("\n[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "src.ui.web:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
