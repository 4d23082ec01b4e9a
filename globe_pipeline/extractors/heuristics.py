"""Per-field extraction strategies for news article pages.

Each field has an ordered list of strategies. A strategy takes the parsed
page and returns a candidate string or None; the first non-empty candidate
wins. Order is a fixed ranking, there is no scoring between candidates.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from bs4 import BeautifulSoup
from rich.console import Console

from globe_pipeline.extractors.structured import find_in_json_ld, normalize_date
from globe_pipeline.extractors.text import clean_text

console = Console()

# Characters kept in a readability excerpt
EXCERPT_LENGTH = 200

# First <article><p> only counts as a description when longer than this
MIN_PARAGRAPH_DESCRIPTION = 50

URL_DATE_RE = re.compile(r"/(\d{4})/(\d{2})/(\d{2})/")

BYLINE_SELECTOR = "p.byline, span.byline, p.author, span.author"
STANDFIRST_SELECTOR = "p.article-description, p.standfirst"
BODY_SELECTOR = "div.content, div.article-body"
HERO_IMAGE_SELECTOR = "img.article, img.main, img.hero"


@dataclass
class ReadabilityView:
    """Reader-mode rendering of a page."""

    title: Optional[str]
    content: Optional[str]  # HTML fragment of the main content

    @property
    def excerpt(self) -> Optional[str]:
        """Opening of the cleaned content, computed on access."""
        return clean_text(self.content)[:EXCERPT_LENGTH] or None


@dataclass
class ArticleContext:
    """Everything a strategy may look at."""

    soup: BeautifulSoup
    readability: Optional[ReadabilityView] = None
    url: Optional[str] = None


Strategy = Callable[[ArticleContext], Optional[str]]


def first_non_empty(
    strategies: Sequence[Strategy],
    context: ArticleContext,
    field: str = "field",
) -> Optional[str]:
    """Run strategies in order and return the first non-empty result.

    A strategy that raises is logged and skipped.
    """
    for strategy in strategies:
        try:
            value = strategy(context)
        except Exception as e:
            name = getattr(strategy, "__name__", repr(strategy))
            console.print(f"[dim]{field}: {name} failed: {e}[/dim]")
            continue

        if isinstance(value, str):
            value = value.strip()
        if value:
            return value
    return None


# ===== SHARED LOOKUPS =====


def meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    """Content of the first <meta> matching the given attributes."""
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = tag.get("content")
    return content if isinstance(content, str) else None


def selector_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    """Trimmed text of the first element matching a CSS selector."""
    tag = soup.select_one(selector)
    return tag.get_text().strip() if tag else None


def selector_html(soup: BeautifulSoup, selector: str) -> str:
    """Concatenated markup of every element matching a CSS selector."""
    return "".join(str(tag) for tag in soup.select(selector))


def format_author(value: Any) -> Optional[str]:
    """Render a JSON-LD author value (string, Person object or list) as text."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("name") or json.dumps(value)
    if isinstance(value, list):
        names = [format_author(member) for member in value]
        return ", ".join(name for name in names if name)
    return None


def image_url_from_json_ld(value: Any) -> Optional[str]:
    """Pick a URL out of a JSON-LD image value (URL, ImageObject or list)."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        url = value.get("url") or value.get("contentUrl")
        return url if isinstance(url, str) else None
    if isinstance(value, list):
        for member in value:
            url = image_url_from_json_ld(member)
            if url:
                return url
    return None


# ===== TITLE =====


def title_from_og(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, property="og:title")


def title_from_title_tag(ctx: ArticleContext) -> Optional[str]:
    tag = ctx.soup.find("title")
    return tag.get_text() if tag else None


def title_from_readability(ctx: ArticleContext) -> Optional[str]:
    return ctx.readability.title if ctx.readability else None


TITLE_STRATEGIES: list[Strategy] = [
    title_from_og,
    title_from_title_tag,
    title_from_readability,
]


# ===== AUTHOR =====


def author_from_meta(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, name="author")


def author_from_article_meta(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, property="article:author")


def author_from_byline(ctx: ArticleContext) -> Optional[str]:
    return selector_text(ctx.soup, BYLINE_SELECTOR)


def author_from_json_ld(ctx: ArticleContext) -> Optional[str]:
    return format_author(find_in_json_ld(ctx.soup, "author"))


AUTHOR_STRATEGIES: list[Strategy] = [
    author_from_meta,
    author_from_article_meta,
    author_from_byline,
    author_from_json_ld,
]


# ===== PUBLISH DATE =====


def date_from_published_time(ctx: ArticleContext) -> Optional[str]:
    return normalize_date(meta_content(ctx.soup, property="article:published_time"))


def date_from_og_pubdate(ctx: ArticleContext) -> Optional[str]:
    return normalize_date(meta_content(ctx.soup, property="og:pubdate"))


def date_from_time_tag(ctx: ArticleContext) -> Optional[str]:
    tag = ctx.soup.find("time", attrs={"datetime": True})
    return normalize_date(tag.get("datetime")) if tag else None


def date_from_url(ctx: ArticleContext) -> Optional[str]:
    """Dates in permalinks such as /2024/01/15/some-slug."""
    if not ctx.url:
        return None
    match = URL_DATE_RE.search(ctx.url)
    if not match:
        return None
    year, month, day = match.groups()
    return normalize_date(f"{year}-{month}-{day}")


def date_from_json_ld(ctx: ArticleContext) -> Optional[str]:
    value = find_in_json_ld(ctx.soup, "datePublished")
    return normalize_date(value) if isinstance(value, str) else None


PUBLISH_DATE_STRATEGIES: list[Strategy] = [
    date_from_published_time,
    date_from_og_pubdate,
    date_from_time_tag,
    date_from_url,
    date_from_json_ld,
]


# ===== DESCRIPTION =====


def description_from_meta(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, name="description")


def description_from_og(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, property="og:description")


def description_from_twitter(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, name="twitter:description")


def description_from_json_ld(ctx: ArticleContext) -> Optional[str]:
    value = find_in_json_ld(ctx.soup, "description")
    return value if isinstance(value, str) else None


def description_from_standfirst(ctx: ArticleContext) -> Optional[str]:
    return selector_text(ctx.soup, STANDFIRST_SELECTOR)


def description_from_first_paragraph(ctx: ArticleContext) -> Optional[str]:
    text = selector_text(ctx.soup, "article p")
    if text and len(text) > MIN_PARAGRAPH_DESCRIPTION:
        return text
    return None


DESCRIPTION_STRATEGIES: list[Strategy] = [
    description_from_meta,
    description_from_og,
    description_from_twitter,
    description_from_json_ld,
    description_from_standfirst,
    description_from_first_paragraph,
]


# ===== MAIN TEXT =====
# Every candidate is cleaned here so markup-only matches fall through.


def text_from_readability(ctx: ArticleContext) -> Optional[str]:
    if not ctx.readability:
        return None
    return clean_text(ctx.readability.content)


def text_from_article_tag(ctx: ArticleContext) -> Optional[str]:
    return clean_text(selector_html(ctx.soup, "article"))


def text_from_body_container(ctx: ArticleContext) -> Optional[str]:
    return clean_text(selector_html(ctx.soup, BODY_SELECTOR))


def text_from_paragraphs(ctx: ArticleContext) -> Optional[str]:
    return clean_text(" ".join(p.get_text() for p in ctx.soup.find_all("p")))


TEXT_STRATEGIES: list[Strategy] = [
    text_from_readability,
    text_from_article_tag,
    text_from_body_container,
    text_from_paragraphs,
]


# ===== TOP IMAGE =====


def image_from_og(ctx: ArticleContext) -> Optional[str]:
    return meta_content(ctx.soup, property="og:image")


def image_from_hero(ctx: ArticleContext) -> Optional[str]:
    tag = ctx.soup.select_one(HERO_IMAGE_SELECTOR)
    src = tag.get("src") if tag else None
    return src if isinstance(src, str) else None


def image_from_json_ld(ctx: ArticleContext) -> Optional[str]:
    return image_url_from_json_ld(find_in_json_ld(ctx.soup, "image"))


TOP_IMAGE_STRATEGIES: list[Strategy] = [
    image_from_og,
    image_from_hero,
    image_from_json_ld,
]
