"""GDELT 2.0 events from the public BigQuery dataset."""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery
from rich.console import Console

from globe_pipeline.errors import UpstreamQueryError
from globe_pipeline.models import RawEvent

console = Console()

GDELT_EVENTS_TABLE = "gdelt-bq.gdeltv2.events"
QUERY_LOCATION = "US"
MAX_EVENTS = 100

DEFAULT_PROJECT_ID = "globev1"
DEFAULT_CREDENTIALS_FILE = "credentials.json"


def build_events_query(keyword: str = "") -> str:
    """SQL for one day of events, optionally filtered by source URL substring."""
    sql = f"""
        SELECT
          GLOBALEVENTID,
          SQLDATE,
          GoldsteinScale,
          EventCode,
          AvgTone,
          Actor1Geo_Lat,
          Actor1Geo_Long,
          Actor1Geo_FullName,
          SourceURL
        FROM `{GDELT_EVENTS_TABLE}`
        WHERE SQLDATE = @sqldate
    """
    if keyword:
        sql += "  AND LOWER(SourceURL) LIKE @keyword_pattern\n"
    sql += f"        LIMIT {MAX_EVENTS}"
    return sql


def build_query_parameters(date: str, keyword: str = "") -> list[bigquery.ScalarQueryParameter]:
    params = [bigquery.ScalarQueryParameter("sqldate", "INT64", int(date))]
    if keyword:
        params.append(
            bigquery.ScalarQueryParameter("keyword_pattern", "STRING", f"%{keyword.lower()}%")
        )
    return params


def credentials_path() -> Path:
    """Service-account key file named by CREDENTIALS_FILE, relative to the working dir."""
    path = Path(os.environ.get("CREDENTIALS_FILE", DEFAULT_CREDENTIALS_FILE))
    return path if path.is_absolute() else Path.cwd() / path


def get_bigquery_client() -> bigquery.Client:
    """Create a BigQuery client from the configured service-account key."""
    key_file = credentials_path()
    project_id = os.environ.get("GCP_PROJECT_ID", DEFAULT_PROJECT_ID)
    console.print(f"[dim]Using credentials file at: {key_file}[/dim]")
    return bigquery.Client.from_service_account_json(str(key_file), project=project_id)


def sqldate_to_iso(sqldate: Any) -> Optional[str]:
    """20240115 -> "2024-01-15T00:00:00Z"."""
    if not sqldate:
        return None
    try:
        day = datetime.strptime(str(sqldate), "%Y%m%d").replace(tzinfo=timezone.utc)
    except ValueError:
        return None
    return day.isoformat().replace("+00:00", "Z")


def row_to_event(row: Mapping[str, Any]) -> RawEvent:
    """Map one result row to a RawEvent."""
    event_code = row.get("EventCode")
    return RawEvent(
        id=row["GLOBALEVENTID"],
        goldstein_scale=row.get("GoldsteinScale"),
        sentiment_score=row.get("AvgTone"),
        event_type=str(event_code) if event_code is not None else None,
        tone=row.get("AvgTone"),
        lat=row.get("Actor1Geo_Lat"),
        lon=row.get("Actor1Geo_Long"),
        location=row.get("Actor1Geo_FullName") or None,
        timestamp=sqldate_to_iso(row.get("SQLDATE")),
        source_url=row.get("SourceURL") or None,
    )


class GdeltSource:
    """Fetches raw events for a (keyword, date) query.

    Args:
        client_factory: Builds the BigQuery client; called once, lazily
    """

    def __init__(self, client_factory: Callable[[], bigquery.Client] = get_bigquery_client):
        self.client_factory = client_factory
        self._client: Optional[bigquery.Client] = None

    @property
    def client(self) -> bigquery.Client:
        if self._client is None:
            self._client = self.client_factory()
        return self._client

    def query_events(self, keyword: str, date: str) -> list[RawEvent]:
        """Run the events query synchronously.

        Raises:
            UpstreamQueryError: credentials, query or result mapping failed
        """
        try:
            job_config = bigquery.QueryJobConfig(
                query_parameters=build_query_parameters(date, keyword)
            )
            job = self.client.query(
                build_events_query(keyword),
                job_config=job_config,
                location=QUERY_LOCATION,
            )
            console.print(f"[dim]BigQuery job {job.job_id} started[/dim]")
            rows = list(job.result())
        except (GoogleAPIError, GoogleAuthError, OSError, ValueError) as e:
            raise UpstreamQueryError(str(e)) from e

        try:
            return [row_to_event(row) for row in rows]
        except (KeyError, ValueError) as e:
            raise UpstreamQueryError(f"Unexpected row shape: {e}") from e

    async def fetch_events(self, keyword: str, date: str) -> list[RawEvent]:
        """Run the blocking query off the event loop."""
        events = await asyncio.to_thread(self.query_events, keyword, date)
        console.print(f"[dim]Raw events fetched: {len(events)}[/dim]")
        return events
