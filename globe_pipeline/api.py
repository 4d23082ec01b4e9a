"""HTTP API serving enriched events to the globe frontend."""

from typing import Annotated, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from rich.console import Console

from globe_pipeline.cache import ExpiringCache
from globe_pipeline.errors import UpstreamQueryError
from globe_pipeline.pipeline import EventSource, run_query, validate_date_param

console = Console()


def get_source(request: Request) -> EventSource:
    return request.app.state.source


def get_cache(request: Request) -> ExpiringCache:
    return request.app.state.cache


def server_error(error: Exception) -> JSONResponse:
    return JSONResponse({"error": "Internal server error", "details": str(error)}, status_code=500)


def create_app(
    source: Optional[EventSource] = None,
    cache: Optional[ExpiringCache] = None,
) -> FastAPI:
    """Build the API app.

    Args:
        source: Upstream event source; GDELT on BigQuery when omitted
        cache: Batch cache; a fresh one-hour cache when omitted
    """
    if source is None:
        from globe_pipeline.sources.gdelt import GdeltSource

        source = GdeltSource()

    app = FastAPI(
        title="Globe Pipeline API",
        description="GDELT events enriched with source article metadata",
    )
    app.state.source = source
    app.state.cache = cache if cache is not None else ExpiringCache()

    @app.get("/api/sentiment")
    async def sentiment(
        source: Annotated[EventSource, Depends(get_source)],
        cache: Annotated[ExpiringCache, Depends(get_cache)],
        q: Annotated[str, Query(description="Keyword matched against source URLs")] = "",
        date: Annotated[Optional[str], Query(description="Event date (YYYYMMDD), default today UTC")] = None,
    ):
        """Events for one day, enriched with article metadata and thumbnails."""
        try:
            date = validate_date_param(date)
        except ValueError as e:
            return JSONResponse({"error": "Invalid date", "details": str(e)}, status_code=400)

        try:
            response = await run_query(source, cache, keyword=q, date=date)
        except UpstreamQueryError as e:
            console.print(f"[red]Error fetching events via BigQuery: {e}[/red]")
            return server_error(e)
        except Exception as e:
            console.print(f"[red]Unexpected error answering events query: {e}[/red]")
            return server_error(e)
        return response.to_record()

    return app


def app_factory() -> FastAPI:
    """Entry point for `uvicorn --factory globe_pipeline.api:app_factory`."""
    load_dotenv(override=True)
    return create_app()
