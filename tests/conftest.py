"""Shared test fixtures and configuration."""

import json
from typing import Callable

import httpx
import pytest

from globe_pipeline.models import EnrichedEvent, ExtractedArticle, RawEvent

ARTICLE_URL = "https://news.example.com/2024/01/15/harbour-talks-resume"

ARTICLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Harbour talks resume | Example News</title>
  <meta property="og:title" content="Harbour talks resume after storm delay">
  <meta name="author" content="Maria Lopez">
  <meta name="description" content="Negotiators returned to the table on Monday.">
  <meta property="article:published_time" content="2024-01-15T08:30:00+01:00">
  <meta property="og:image" content="/media/harbour.jpg">
  <script>window.tracking = {"page": "article"};</script>
</head>
<body>
  <nav><a href="/">Home</a> <a href="/world">World</a></nav>
  <article>
    <h1>Harbour talks resume after storm delay</h1>
    <p>Negotiators from both port authorities returned to the table on Monday,
    a week after a winter storm forced the talks to be postponed.</p>
    <p>The dispute centres on berth allocation for container ships and on who
    pays for dredging the shared approach channel, officials said.</p>
    <p>A spokesperson said a draft agreement could be ready by the end of the
    month if both sides keep to the current timetable for the negotiations.</p>
  </article>
  <footer>Copyright Example News</footer>
</body>
</html>
"""

# Only a <title> and one long paragraph inside <article>
MINIMAL_HTML = (
    "<html><head><title>Minimal page</title></head><body>"
    "<article><p>This paragraph is exactly long enough to count as a description here.</p></article>"
    "</body></html>"
)

JSON_LD_AUTHOR_HTML = """<html>
<head>
  <title>Linked data story</title>
  <script type="application/ld+json">{"@context": "https://schema.org", "@type": "NewsArticle",
   "author": {"@type": "Person", "name": "Jane Doe"}, "datePublished": "2024-02-01T12:00:00Z"}</script>
</head>
<body><article><p>Body text of a story whose author is only named in linked data markup.</p></article></body>
</html>
"""

NO_AUTHOR_HTML = """<html>
<head><title>Anonymous story</title></head>
<body><article><p>Nobody signed this article and there is no byline anywhere on the page at all.</p></article></body>
</html>
"""


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def article_url() -> str:
    return ARTICLE_URL


@pytest.fixture
def raw_event() -> RawEvent:
    """A raw event as mapped from one BigQuery row."""
    return RawEvent(
        id=1117854321,
        goldstein_scale=-2.0,
        sentiment_score=-3.4,
        event_type="036",
        tone=-3.4,
        lat=50.4422,
        lon=30.5367,
        location="Kyiv, Kyiv, Ukraine",
        timestamp="2024-01-15T00:00:00Z",
        source_url=ARTICLE_URL,
    )


@pytest.fixture
def bare_event() -> RawEvent:
    """An event with no location and no source URL; enriching it makes no requests."""
    return RawEvent(id=42, tone=1.5, lat=10.0, lon=20.0, timestamp="2024-01-15T00:00:00Z")


@pytest.fixture
def enriched_event(raw_event) -> EnrichedEvent:
    return EnrichedEvent.from_raw(
        raw_event,
        article=ExtractedArticle(title="Harbour talks resume", author="Maria Lopez"),
        image="https://upload.wikimedia.org/kyiv.jpg",
    )


def wikipedia_payload(source: str = "https://upload.wikimedia.org/thumb/kyiv.jpg") -> dict:
    return {
        "batchcomplete": "",
        "query": {
            "pages": {
                "12345": {
                    "pageid": 12345,
                    "ns": 0,
                    "title": "Kyiv",
                    "thumbnail": {"source": source, "width": 300, "height": 200},
                }
            }
        },
    }


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by `handler`."""
    from globe_pipeline.extractors.fetch import create_http_client

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return create_http_client(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def news_handler():
    """Answers Wikipedia API calls with a thumbnail and everything else with the article page."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "en.wikipedia.org":
            return httpx.Response(200, content=json.dumps(wikipedia_payload()).encode(),
                                  headers={"Content-Type": "application/json"})
        return httpx.Response(200, text=ARTICLE_HTML, headers={"Content-Type": "text/html"})

    return handler
