"""Event enrichment: article metadata and location thumbnails.

Every event in a batch is enriched concurrently with no concurrency limit;
each one triggers at most two outbound requests (article page and Wikipedia).
"""

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
from rich.console import Console

from globe_pipeline.extractors.article import extract_article
from globe_pipeline.extractors.fetch import create_http_client
from globe_pipeline.enrichers.wikipedia import fetch_location_image
from globe_pipeline.models import EnrichedEvent, ExtractedArticle, RawEvent
from globe_pipeline.normalizers.coordinates import resolve_collisions

console = Console()

ArticleFn = Callable[[str, httpx.AsyncClient], Awaitable[ExtractedArticle]]
ImageFn = Callable[[str, httpx.AsyncClient], Awaitable[Optional[str]]]


async def _default_article(url: str, client: httpx.AsyncClient) -> ExtractedArticle:
    return await extract_article(url, client=client)


async def _default_image(title: str, client: httpx.AsyncClient) -> Optional[str]:
    return await fetch_location_image(title, client=client)


async def _nothing() -> None:
    return None


async def enrich_event(
    event: RawEvent,
    client: httpx.AsyncClient,
    article_fn: ArticleFn = _default_article,
    image_fn: ImageFn = _default_image,
) -> EnrichedEvent:
    """Attach article metadata and a location image to one event.

    Neither lookup can fail the event: a missing image stays None and an
    extractor crash is recorded in article_error.
    """
    image, article = await asyncio.gather(
        image_fn(event.location, client) if event.location else _nothing(),
        article_fn(event.source_url, client) if event.source_url else _nothing(),
        return_exceptions=True,
    )

    if isinstance(image, Exception):
        console.print(f"[yellow]Image lookup failed for {event.location}: {image}[/yellow]")
        image = None

    if isinstance(article, Exception):
        console.print(f"[red]Error extracting article for {event.source_url}: {article}[/red]")
        return EnrichedEvent.from_raw(event, image=image, article_error=str(article))

    return EnrichedEvent.from_raw(event, article=article, image=image)


async def enrich_events(
    events: list[RawEvent],
    client: Optional[httpx.AsyncClient] = None,
    article_fn: ArticleFn = _default_article,
    image_fn: ImageFn = _default_image,
) -> list[EnrichedEvent]:
    """Enrich a batch concurrently, then fan out colliding coordinates.

    Args:
        events: Raw events from the upstream query
        client: Shared HTTP client; one is created and closed when omitted
        article_fn: Article extractor, replaceable for tests
        image_fn: Location image lookup, replaceable for tests

    Returns:
        Enriched events in input order
    """
    if not events:
        return []

    own_client = client is None
    if own_client:
        client = create_http_client()

    console.print(f"[cyan]Enriching {len(events)} events...[/cyan]")
    try:
        enriched = await asyncio.gather(
            *[enrich_event(event, client, article_fn, image_fn) for event in events]
        )
    finally:
        if own_client:
            await client.aclose()

    with_articles = sum(1 for event in enriched if event.article and not event.article.error)
    console.print(f"[green]Enriched {with_articles}/{len(enriched)} events with articles[/green]")

    return list(resolve_collisions(list(enriched)))
