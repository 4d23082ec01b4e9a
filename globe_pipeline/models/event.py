"""GDELT event models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from globe_pipeline.models.article import ExtractedArticle


class RawEvent(BaseModel):
    """One row of the upstream GDELT events query."""

    id: int
    goldstein_scale: Optional[float] = None  # Conflict score, -10..+10
    sentiment_score: Optional[float] = None  # Average tone
    event_type: Optional[str] = None  # CAMEO event code
    tone: Optional[float] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    location: Optional[str] = None  # Actor1 geo full name
    timestamp: Optional[str] = None  # ISO-8601, midnight UTC of the event date
    source_url: Optional[str] = None

    class Config:
        extra = "ignore"
        frozen = True

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_record(self) -> dict:
        """Convert to the camelCase JSON shape served to the globe frontend."""
        return {
            "id": self.id,
            "goldsteinScale": self.goldstein_scale,
            "sentimentScore": self.sentiment_score,
            "eventType": self.event_type,
            "tone": self.tone,
            "lat": self.lat,
            "lon": self.lon,
            "location": self.location,
            "timestamp": self.timestamp,
            "sourceURL": self.source_url,
        }


class EnrichedEvent(RawEvent):
    """Event with its article metadata and location thumbnail attached.

    Coordinates stay mutable so the collision resolver can fan out markers.
    """

    article: Optional[ExtractedArticle] = None
    image: Optional[str] = None
    article_error: Optional[str] = None

    class Config:
        extra = "ignore"
        frozen = False

    @classmethod
    def from_raw(cls, event: RawEvent, **enrichment) -> "EnrichedEvent":
        return cls(**event.model_dump(), **enrichment)

    def to_record(self) -> dict:
        record = super().to_record()
        record["article"] = self.article.to_record() if self.article else None
        record["image"] = self.image
        if self.article_error is not None:
            record["articleError"] = self.article_error
        return record


class EventsResponse(BaseModel):
    """Payload of the inbound events query."""

    events: list[EnrichedEvent] = Field(default_factory=list)
    last_updated: datetime

    def to_record(self) -> dict:
        return {
            "events": [event.to_record() for event in self.events],
            "lastUpdated": self.last_updated.isoformat().replace("+00:00", "Z"),
        }
