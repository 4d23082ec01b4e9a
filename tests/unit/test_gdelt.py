"""Tests for the GDELT BigQuery source."""

import asyncio

import pytest
from google.api_core.exceptions import BadRequest
from google.auth.exceptions import DefaultCredentialsError

from globe_pipeline.errors import UpstreamQueryError
from globe_pipeline.sources.gdelt import (
    GDELT_EVENTS_TABLE,
    MAX_EVENTS,
    GdeltSource,
    build_events_query,
    build_query_parameters,
    credentials_path,
    row_to_event,
    sqldate_to_iso,
)

SAMPLE_ROW = {
    "GLOBALEVENTID": 1117854321,
    "SQLDATE": 20240115,
    "GoldsteinScale": -2.0,
    "EventCode": "036",
    "AvgTone": -3.4,
    "Actor1Geo_Lat": 50.4422,
    "Actor1Geo_Long": 30.5367,
    "Actor1Geo_FullName": "Kyiv, Kyiv, Ukraine",
    "SourceURL": "https://news.example.com/2024/01/15/harbour-talks-resume",
}


class FakeJob:
    job_id = "job-123"

    def __init__(self, rows):
        self.rows = rows

    def result(self):
        return iter(self.rows)


class FakeClient:
    """Records queries and returns canned rows."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.queries = []

    def query(self, sql, job_config=None, location=None):
        self.queries.append((sql, job_config, location))
        if self.error:
            raise self.error
        return FakeJob(self.rows)


class TestRowMapping:
    """Tests for BigQuery row to RawEvent mapping."""

    def test_full_row(self):
        event = row_to_event(SAMPLE_ROW)

        assert event.id == 1117854321
        assert event.goldstein_scale == -2.0
        assert event.sentiment_score == -3.4
        assert event.tone == -3.4
        assert event.event_type == "036"
        assert (event.lat, event.lon) == (50.4422, 30.5367)
        assert event.location == "Kyiv, Kyiv, Ukraine"
        assert event.timestamp == "2024-01-15T00:00:00Z"
        assert event.source_url == SAMPLE_ROW["SourceURL"]

    def test_sparse_row(self):
        """Missing geo and URL columns map to None."""
        event = row_to_event({"GLOBALEVENTID": 7, "SQLDATE": 20240115, "Actor1Geo_FullName": "", "SourceURL": ""})
        assert event.lat is None
        assert event.lon is None
        assert event.location is None
        assert event.source_url is None
        assert event.event_type is None

    def test_missing_id(self):
        with pytest.raises(KeyError):
            row_to_event({"SQLDATE": 20240115})

    @pytest.mark.parametrize("sqldate,expected", [
        (20240115, "2024-01-15T00:00:00Z"),
        ("20231231", "2023-12-31T00:00:00Z"),
        (None, None),
        (2024, None),
    ])
    def test_sqldate_to_iso(self, sqldate, expected):
        assert sqldate_to_iso(sqldate) == expected


class TestQueryBuilding:
    """Tests for SQL and parameter construction."""

    def test_query_without_keyword(self):
        sql = build_events_query()
        assert f"`{GDELT_EVENTS_TABLE}`" in sql
        assert "SQLDATE = @sqldate" in sql
        assert "@keyword_pattern" not in sql
        assert sql.strip().endswith(f"LIMIT {MAX_EVENTS}")

    def test_query_with_keyword(self):
        assert "LOWER(SourceURL) LIKE @keyword_pattern" in build_events_query("ukraine")

    def test_parameters(self):
        params = build_query_parameters("20240115", "Ukraine")
        assert [(p.name, p.type_, p.value) for p in params] == [
            ("sqldate", "INT64", 20240115),
            ("keyword_pattern", "STRING", "%ukraine%"),
        ]

    def test_parameters_without_keyword(self):
        assert [p.name for p in build_query_parameters("20240115")] == ["sqldate"]


class TestGdeltSource:
    """Tests for query execution and error wrapping."""

    def test_fetch_events(self):
        client = FakeClient(rows=[SAMPLE_ROW, dict(SAMPLE_ROW, GLOBALEVENTID=2)])
        source = GdeltSource(client_factory=lambda: client)

        events = asyncio.run(source.fetch_events("ukraine", "20240115"))

        assert [e.id for e in events] == [1117854321, 2]
        sql, job_config, location = client.queries[0]
        assert "@keyword_pattern" in sql
        assert location == "US"
        assert [p.name for p in job_config.query_parameters] == ["sqldate", "keyword_pattern"]

    def test_client_created_once(self):
        created = []

        def factory():
            created.append(1)
            return FakeClient()

        source = GdeltSource(client_factory=factory)
        source.query_events("", "20240115")
        source.query_events("", "20240116")
        assert len(created) == 1

    @pytest.mark.parametrize("error", [
        BadRequest("Syntax error"),
        FileNotFoundError("credentials.json"),
    ])
    def test_query_errors_wrapped(self, error):
        source = GdeltSource(client_factory=lambda: FakeClient(error=error))
        with pytest.raises(UpstreamQueryError):
            source.query_events("", "20240115")

    def test_credentials_error_wrapped(self):
        def factory():
            raise DefaultCredentialsError("no credentials")

        with pytest.raises(UpstreamQueryError, match="no credentials"):
            asyncio.run(GdeltSource(client_factory=factory).fetch_events("", "20240115"))

    def test_bad_row_wrapped(self):
        source = GdeltSource(client_factory=lambda: FakeClient(rows=[{"SQLDATE": 20240115}]))
        with pytest.raises(UpstreamQueryError, match="Unexpected row shape"):
            source.query_events("", "20240115")


class TestCredentials:
    """Tests for credentials file resolution."""

    def test_default_relative_to_cwd(self, monkeypatch, tmp_path):
        monkeypatch.delenv("CREDENTIALS_FILE", raising=False)
        monkeypatch.chdir(tmp_path)
        assert credentials_path() == tmp_path.resolve() / "credentials.json"

    def test_absolute_path_kept(self, monkeypatch, tmp_path):
        key_file = tmp_path / "sa.json"
        monkeypatch.setenv("CREDENTIALS_FILE", str(key_file))
        assert credentials_path() == key_file
