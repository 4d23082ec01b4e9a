"""Article extractor: URL or raw HTML in, ExtractedArticle out.

Builds two views of the page, a BeautifulSoup tree for selector lookups and
a readability (reader-mode) rendering, then runs each field's fallback chain
from heuristics.py against them.
"""

from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from readability import Document
from rich.console import Console

from globe_pipeline.errors import FetchError, MissingFieldWarning
from globe_pipeline.extractors.fetch import fetch_html, is_url
from globe_pipeline.extractors.heuristics import (
    AUTHOR_STRATEGIES,
    DESCRIPTION_STRATEGIES,
    PUBLISH_DATE_STRATEGIES,
    TEXT_STRATEGIES,
    TITLE_STRATEGIES,
    TOP_IMAGE_STRATEGIES,
    ArticleContext,
    ReadabilityView,
    first_non_empty,
)
from globe_pipeline.extractors.text import detect_language
from globe_pipeline.models import DEFAULT_AUTHOR, ExtractedArticle

console = Console()

CRUCIAL_FIELDS = ("title", "text")

# readability-lxml's placeholder when a page has no <title>
READABILITY_NO_TITLE = "[no-title]"


def build_readability_view(html: str) -> Optional[ReadabilityView]:
    """Reader-mode view of the page, or None when readability gives up."""
    if not html or not html.strip():
        return None

    try:
        doc = Document(html)
        content = doc.summary(html_partial=True)
        title = doc.title()
    except Exception as e:
        console.print(f"[dim]Readability could not parse page: {e}[/dim]")
        return None

    if title == READABILITY_NO_TITLE:
        title = None

    return ReadabilityView(title=title, content=content)


def build_context(html: str, url: Optional[str] = None) -> ArticleContext:
    """Parse HTML into the views strategies work on. Never raises on bad markup."""
    soup = BeautifulSoup(html or "", "lxml")
    return ArticleContext(soup=soup, readability=build_readability_view(html), url=url)


class ArticleExtractor:
    """Extract article metadata from a URL or a raw HTML string.

    Args:
        content: Article URL (http/https) or literal HTML
        client: Shared HTTP client used when content is a URL
        retry_delay: Seconds between fetch attempts, None for the default
    """

    def __init__(
        self,
        content: str,
        client: Optional[httpx.AsyncClient] = None,
        retry_delay: Optional[float] = None,
    ):
        self.url: Optional[str] = content.strip() if is_url(content) else None
        self.html: str = "" if self.url else content
        self.client = client
        self.retry_delay = retry_delay

    async def _load(self) -> str:
        if not self.url:
            return self.html
        kwargs = {}
        if self.retry_delay is not None:
            kwargs["retry_delay"] = self.retry_delay
        return await fetch_html(self.url, client=self.client, **kwargs)

    async def extract(self) -> ExtractedArticle:
        """Run every field's strategy chain.

        Only a failed fetch yields an all-empty result; field-level problems
        leave the rest of the article intact.
        """
        try:
            self.html = await self._load()
        except FetchError as e:
            console.print(f"[red]Error extracting article: {e}[/red]")
            return ExtractedArticle.failed(str(e))

        return self.extract_from_context(build_context(self.html, self.url))

    def extract_from_context(self, ctx: ArticleContext) -> ExtractedArticle:
        text = first_non_empty(TEXT_STRATEGIES, ctx, "text")

        article = ExtractedArticle(
            title=first_non_empty(TITLE_STRATEGIES, ctx, "title"),
            author=first_non_empty(AUTHOR_STRATEGIES, ctx, "author") or DEFAULT_AUTHOR,
            publish_date=first_non_empty(PUBLISH_DATE_STRATEGIES, ctx, "publish_date"),
            description=first_non_empty(DESCRIPTION_STRATEGIES, ctx, "description"),
            text=text,
            top_image=self._resolve_image(first_non_empty(TOP_IMAGE_STRATEGIES, ctx, "top_image")),
            language=detect_language(text),
        )

        missing = [field for field in CRUCIAL_FIELDS if not getattr(article, field)]
        if missing:
            warning = MissingFieldWarning(missing)
            console.print(f"[yellow]{warning}[/yellow]")
            article.error = str(warning)

        return article

    def _resolve_image(self, image_url: Optional[str]) -> Optional[str]:
        if image_url and self.url:
            return urljoin(self.url, image_url)
        return image_url


async def extract_article(
    content: str,
    client: Optional[httpx.AsyncClient] = None,
    retry_delay: Optional[float] = None,
) -> ExtractedArticle:
    """Extract article metadata from a URL or raw HTML string."""
    return await ArticleExtractor(content, client=client, retry_delay=retry_delay).extract()
