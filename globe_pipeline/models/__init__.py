"""Data models for the globe pipeline."""

from globe_pipeline.models.article import DEFAULT_AUTHOR, ExtractedArticle
from globe_pipeline.models.event import EnrichedEvent, EventsResponse, RawEvent

__all__ = [
    "DEFAULT_AUTHOR",
    "ExtractedArticle",
    "RawEvent",
    "EnrichedEvent",
    "EventsResponse",
]
