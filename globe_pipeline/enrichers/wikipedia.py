"""Location thumbnails from Wikipedia's page-image API.

Best-effort: any failure yields None, and there is no retry.
"""

from typing import Optional

import httpx
from rich.console import Console

console = Console()

WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"
THUMBNAIL_SIZE = 300

# Wikimedia rejects requests without a descriptive agent
USER_AGENT = "globe-pipeline/0.1 (GDELT event enrichment)"


def thumbnail_from_response(data: dict) -> Optional[str]:
    """Thumbnail URL of the first page in a pageimages query response."""
    pages = data.get("query", {}).get("pages", {})
    if not pages:
        return None
    first_page = next(iter(pages.values()))
    thumbnail = first_page.get("thumbnail") if isinstance(first_page, dict) else None
    return thumbnail.get("source") if thumbnail else None


async def fetch_location_image(
    title: str,
    client: Optional[httpx.AsyncClient] = None,
    size: int = THUMBNAIL_SIZE,
) -> Optional[str]:
    """Look up a thumbnail for a place name.

    Args:
        title: Page title to query, e.g. "Kyiv, Kyiv, Ukraine"
        client: Shared client; a short-lived one is created when omitted
        size: Thumbnail width in pixels

    Returns:
        Thumbnail URL, or None when the page has no image or the call fails
    """
    if not title:
        return None

    params = {
        "action": "query",
        "titles": title,
        "prop": "pageimages",
        "format": "json",
        "pithumbsize": size,
        "origin": "*",
    }
    headers = {"User-Agent": USER_AGENT}

    try:
        if client is not None:
            response = await client.get(WIKIPEDIA_API, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=10.0) as own_client:
                response = await own_client.get(WIKIPEDIA_API, params=params, headers=headers)
        response.raise_for_status()
        return thumbnail_from_response(response.json())

    except (httpx.HTTPError, ValueError, AttributeError) as e:
        console.print(f"[dim]No Wikipedia image for {title}: {e}[/dim]")
        return None
