"""CLI for the globe pipeline."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from globe_pipeline.cache import ExpiringCache
from globe_pipeline.errors import UpstreamQueryError
from globe_pipeline.extractors import extract_article
from globe_pipeline.pipeline import print_event_summary, run_query, validate_date_param

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="globe-pipeline",
    help="GDELT event enrichment pipeline",
    add_completion=False,
)
console = Console()


def _is_file(source: str) -> bool:
    """Check for a file without tripping over literal HTML passed as the argument."""
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        # Name too long, or an embedded NUL byte
        return False


@app.command()
def extract(
    source: str = typer.Argument(..., help="Article URL, or path to a saved HTML file"),
    show_text: bool = typer.Option(False, "--text/--no-text", help="Print the full main text"),
):
    """Extract article metadata from a URL or a local HTML file."""
    content = source
    if not source.startswith(("http://", "https://")) and _is_file(source):
        content = Path(source).read_text(encoding="utf-8", errors="replace")

    article = asyncio.run(extract_article(content))

    record = article.to_record()
    if not show_text and record.get("text"):
        record["text"] = record["text"][:300] + ("..." if len(record["text"]) > 300 else "")
    console.print_json(json.dumps(record))

    if article.error:
        console.print(f"[yellow]{article.error}[/yellow]")


@app.command()
def events(
    keyword: str = typer.Option("", "--q", "-q", help="Keyword matched against source URLs"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Event date (YYYYMMDD), default today UTC"),
    limit: int = typer.Option(20, "--limit", "-l", help="Rows to show in the summary"),
    as_json: bool = typer.Option(False, "--json", help="Print the full JSON response instead"),
):
    """Fetch and enrich one day of GDELT events."""
    from globe_pipeline.sources.gdelt import GdeltSource

    try:
        date = validate_date_param(date)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        response = asyncio.run(run_query(GdeltSource(), ExpiringCache(), keyword=keyword, date=date))
    except UpstreamQueryError as e:
        console.print(f"[red]Error fetching events: {e}[/red]")
        console.print("[dim]Check CREDENTIALS_FILE and GCP_PROJECT_ID in .env[/dim]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(response.to_record()))
    else:
        print_event_summary(response.events, limit=limit)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
):
    """Start the events API server."""
    import uvicorn

    console.print(f"[cyan]Serving on http://{host}:{port}/api/sentiment[/cyan]")
    uvicorn.run("globe_pipeline.api:app_factory", host=host, port=port, factory=True)


def main():
    app()


if __name__ == "__main__":
    main()
