"""Error taxonomy for the enrichment pipeline.

Only UpstreamQueryError aborts a request. FetchError ends a single article's
extraction; ParseError and MissingFieldWarning never leave the extractor.
"""

from typing import Optional, Sequence


class PipelineError(Exception):
    """Base class for pipeline failures."""


class FetchError(PipelineError):
    """Article HTML could not be retrieved after all retry attempts."""

    def __init__(self, url: str, attempts: int, reason: Optional[str] = None):
        self.url = url
        self.attempts = attempts
        self.reason = reason
        message = f"Failed to fetch {url} after {attempts} attempts"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(PipelineError):
    """Malformed HTML or embedded JSON. Always recovered where it is raised."""


class MissingFieldWarning(UserWarning):
    """Extraction finished without one or more crucial fields."""

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(f"Missing crucial fields: {', '.join(self.fields)}")


class UpstreamQueryError(PipelineError):
    """The base event batch could not be fetched from the data warehouse."""
