"""HTTP fetcher for news article pages.

Fixed retry policy: a handful of attempts with a constant pause between them.
Publishers behind GDELT source URLs are mostly static sites, so there is no
JavaScript rendering path.
"""

import asyncio
from typing import Optional

import httpx
from rich.console import Console

from globe_pipeline.errors import FetchError

console = Console()

# Desktop Chrome. Several publishers serve stripped pages to unknown agents.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

FETCH_TIMEOUT = 10.0  # Seconds per attempt
FETCH_RETRIES = 3  # Attempts in total, not retries after the first
RETRY_DELAY = 1.0  # Seconds between attempts

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def is_url(content: str) -> bool:
    """Check whether extractor input is a URL rather than literal HTML."""
    stripped = content.strip()
    return stripped.startswith("http://") or stripped.startswith("https://")


def create_http_client(
    timeout: float = FETCH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an async client shared by every request of one event batch."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers=DEFAULT_HEADERS,
        transport=transport,
    )


async def _get_text(client: httpx.AsyncClient, url: str, timeout: float) -> str:
    response = await client.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    response.raise_for_status()
    return response.text


async def fetch_html(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = FETCH_TIMEOUT,
    retries: int = FETCH_RETRIES,
    retry_delay: float = RETRY_DELAY,
) -> str:
    """Fetch a page's HTML, retrying on any HTTP failure.

    Args:
        url: Page URL
        client: Shared client; a short-lived one is created when omitted
        timeout: Per-attempt timeout in seconds
        retries: Total number of attempts
        retry_delay: Fixed pause between attempts in seconds

    Returns:
        Response body as text

    Raises:
        FetchError: every attempt failed
    """
    url = url.strip()
    last_error: Optional[str] = None

    for attempt in range(retries):
        try:
            if client is not None:
                return await _get_text(client, url, timeout)
            async with create_http_client(timeout=timeout) as own_client:
                return await _get_text(own_client, url, timeout)

        except httpx.InvalidURL as e:
            raise FetchError(url, attempt + 1, str(e)) from e
        except httpx.TimeoutException:
            last_error = "timeout"
        except httpx.HTTPStatusError as e:
            last_error = str(e.response.status_code)
        except httpx.HTTPError as e:
            last_error = str(e) or type(e).__name__.lower()

        console.print(
            f"[yellow]Error fetching {url} (attempt {attempt + 1}/{retries}): {last_error}[/yellow]"
        )
        if attempt < retries - 1:
            await asyncio.sleep(retry_delay)

    raise FetchError(url, retries, last_error)
