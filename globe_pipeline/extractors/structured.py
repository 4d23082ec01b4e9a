"""Structured data helpers: date normalization and Schema.org JSON-LD lookup."""

import json
from datetime import datetime
from typing import Any, Iterator, Optional

from bs4 import BeautifulSoup
from dateutil import parser as dateutil_parser
from rich.console import Console

from globe_pipeline.errors import ParseError

console = Console()

CANONICAL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# JSON-LD graphs are parsed JSON and cannot be cyclic, but some publishers
# nest thousands of levels of breadcrumbs.
MAX_JSON_LD_DEPTH = 32


def normalize_date(date_str: Optional[str]) -> Optional[str]:
    """Parse an ISO-8601 or loosely formatted date to "YYYY-MM-DD HH:MM:SS".

    Timezone offsets are dropped, not converted, so the calendar date and
    wall-clock time written by the publisher survive. Returns None for
    anything unparseable.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    date_str = date_str.strip()
    if not date_str:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = dateutil_parser.isoparse(date_str)
    except (ValueError, OverflowError):
        pass

    if parsed is None:
        try:
            parsed = dateutil_parser.parse(date_str)
        except (ValueError, OverflowError, TypeError):
            return None

    try:
        return parsed.strftime(CANONICAL_DATE_FORMAT)
    except ValueError:
        # strftime rejects some out-of-range years
        return None


def parse_json_ld_block(raw: Optional[str]) -> Any:
    """Parse the body of one JSON-LD script tag."""
    if not raw or not raw.strip():
        raise ParseError("empty JSON-LD block")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON-LD: {e}") from e


def iter_json_ld(soup: BeautifulSoup) -> Iterator[Any]:
    """Yield every parseable JSON-LD block in document order."""
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            yield parse_json_ld_block(script.string or script.get_text())
        except ParseError as e:
            console.print(f"[dim]Skipping JSON-LD block: {e}[/dim]")


def _search(node: Any, key: str, depth: int) -> Any:
    """Depth-first search for the first truthy value stored under `key`."""
    if depth > MAX_JSON_LD_DEPTH:
        return None

    if isinstance(node, dict):
        value = node.get(key)
        if value:
            return value
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        if isinstance(child, (dict, list)):
            found = _search(child, key, depth + 1)
            if found:
                return found
    return None


def find_in_json_ld(soup: BeautifulSoup, key: str) -> Any:
    """Find a field anywhere in the page's JSON-LD blocks.

    Blocks are scanned in document order and the first match wins. The raw
    value is returned, which may be a string, a list or a nested object.
    """
    for block in iter_json_ld(soup):
        found = _search(block, key, 0)
        if found:
            return found
    return None
