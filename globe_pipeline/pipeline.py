"""Main pipeline orchestration: query, enrich, resolve, cache."""

import re
from datetime import datetime, timezone
from typing import Optional, Protocol

import httpx
from rich.console import Console
from rich.table import Table

from globe_pipeline.cache import ExpiringCache, cache_key
from globe_pipeline.enrichers import enrich_events
from globe_pipeline.models import EnrichedEvent, EventsResponse, RawEvent

console = Console()

DATE_PARAM_RE = re.compile(r"^\d{8}$")


class EventSource(Protocol):
    async def fetch_events(self, keyword: str, date: str) -> list[RawEvent]: ...


def today_utc() -> str:
    """Current UTC date as YYYYMMDD."""
    return datetime.now(timezone.utc).strftime("%Y%m%d")


def validate_date_param(date: Optional[str]) -> str:
    """Default a missing date to today (UTC) and reject anything but 8 digits."""
    if not date:
        return today_utc()
    date = date.strip()
    if not DATE_PARAM_RE.match(date):
        raise ValueError(f"date must be YYYYMMDD, got {date!r}")
    return date


async def run_query(
    source: EventSource,
    cache: ExpiringCache[list[EnrichedEvent]],
    keyword: str = "",
    date: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> EventsResponse:
    """Answer one events query.

    1. Serve a fresh cached batch for (keyword, date) if there is one
    2. Fetch raw events from the upstream source
    3. Enrich them concurrently and fan out colliding coordinates
    4. Cache the batch

    Raises:
        ValueError: date is not YYYYMMDD
        UpstreamQueryError: raw events could not be fetched
    """
    keyword = keyword or ""
    date = validate_date_param(date)
    key = cache_key(keyword, date)

    entry = cache.get_entry(key)
    if entry is not None:
        console.print(f"[dim]Returning cached data for {key}[/dim]")
        return EventsResponse(
            events=entry.data,
            last_updated=datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc),
        )

    raw_events = await source.fetch_events(keyword, date)
    events = await enrich_events(raw_events, client=client)

    entry = cache.set(key, events)
    return EventsResponse(
        events=events,
        last_updated=datetime.fromtimestamp(entry.timestamp / 1000, tz=timezone.utc),
    )


def print_event_summary(events: list[EnrichedEvent], limit: int = 20) -> None:
    """Print a summary table of enriched events."""
    table = Table(title=f"Events (showing {min(len(events), limit)} of {len(events)})")
    table.add_column("ID", style="cyan")
    table.add_column("Location", style="green", max_width=30)
    table.add_column("Tone", style="magenta", justify="right")
    table.add_column("Goldstein", style="yellow", justify="right")
    table.add_column("Title", style="blue", max_width=40)
    table.add_column("Lang", style="dim")

    for event in events[:limit]:
        article = event.article
        title = (article.title if article else None) or event.article_error or "-"
        table.add_row(
            str(event.id),
            (event.location or "?")[:30],
            f"{event.tone:.2f}" if event.tone is not None else "?",
            f"{event.goldstein_scale:.1f}" if event.goldstein_scale is not None else "?",
            title[:40],
            (article.language if article else None) or "-",
        )

    console.print(table)
