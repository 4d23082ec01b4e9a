"""Article metadata recovered from a news source page."""

from typing import Optional

from pydantic import BaseModel

DEFAULT_AUTHOR = "Unknown Author"


class ExtractedArticle(BaseModel):
    """Best-effort article metadata. Every field may be missing."""

    title: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[str] = None  # "YYYY-MM-DD HH:MM:SS"
    description: Optional[str] = None
    text: Optional[str] = None  # Cleaned main text, paragraphs split by blank lines
    top_image: Optional[str] = None
    language: Optional[str] = None  # ISO 639-1
    error: Optional[str] = None

    class Config:
        extra = "ignore"

    @classmethod
    def failed(cls, error: str) -> "ExtractedArticle":
        """Result for an extraction that never got any HTML to work with."""
        return cls(error=error)

    @property
    def content_fields(self) -> dict[str, Optional[str]]:
        return self.model_dump(exclude={"error"})

    def to_record(self) -> dict:
        """Convert to the JSON shape served to the globe frontend."""
        record = self.model_dump(exclude={"error"})
        if self.error is not None:
            record["error"] = self.error
        return record
