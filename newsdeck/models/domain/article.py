"""Domain models for the aggregation pipeline.

Everything here is request-scoped: built for one aggregation call and
discarded once the response is sent.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from newsdeck.core.constants import DEFAULT_TITLE, Category, SourceName


class Article(BaseModel):
    """Unified article produced by every source adapter.

    Serializes with camelCase keys (``publishedAt``, ``readTime``,
    ``isVideo`` ...) which is the shape the feed client consumes.

    Attributes:
        id: Identifier unique within one aggregation response
        title: Display title, ``"Untitled"`` when the provider has none
        summary: Short description, may be empty
        content: Body text, may equal the summary
        image: Absolute image URL or None when no image is available
        source: Provider or publisher display name
        category: Normalized category the article was fetched under
        published_at: Publication timestamp (UTC)
        read_time: Display read time or video duration
        url: Link to the original story
        is_video: True only for video platform items
        video_id: Provider video id (videos only)
        embed_url: Embeddable player URL (videos only)
        video_thumbnail: Thumbnail URL (videos only)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(min_length=1)
    title: str = Field(default=DEFAULT_TITLE)
    summary: str = ""
    content: str = ""
    image: str | None = None
    source: str
    category: Category
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    read_time: str
    url: str | None = None
    is_video: bool = False
    video_id: str | None = None
    embed_url: str | None = None
    video_thumbnail: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: object) -> object:
        """Replace a blank title with the literal placeholder."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_TITLE
        return v

    @model_validator(mode="after")
    def check_video_fields(self) -> "Article":
        """Video items must carry both a video id and an embed URL."""
        if self.is_video and not (self.video_id and self.embed_url):
            raise ValueError("video articles require video_id and embed_url")
        return self

    @property
    def combined_text(self) -> str:
        """Lower-cased title and summary used for keyword matching."""
        return f"{self.title} {self.summary}".lower()


class AggregationRequest(BaseModel):
    """Normalized input for one aggregation call.

    Attributes:
        category: Normalized category
        country: Two-letter country code (lower case)
        page_size: Number of articles wanted
        search_query: Optional free-text query narrowing the category
        source_selector: Optional single source to fetch from
        request_id: Identifier stamped on every log record of this call
    """

    category: Category = Category.GENERAL
    country: str = "gb"
    page_size: int = Field(default=20, ge=1)
    search_query: str | None = None
    source_selector: SourceName | None = None
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])

    @field_validator("country")
    @classmethod
    def lower_country(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("search_query")
    @classmethod
    def blank_query_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class SourceResult(BaseModel):
    """Outcome of one adapter call.

    Attributes:
        source: Source the result belongs to
        articles: Articles in the adapter's own order
        success: False when the adapter failed or timed out
        error: Failure cause for logging
        duration_seconds: Wall time spent in the adapter
    """

    source: SourceName
    articles: list[Article] = Field(default_factory=list)
    success: bool = True
    error: str | None = None
    duration_seconds: float = 0.0

    @classmethod
    def failed(cls, source: SourceName, error: str, duration_seconds: float = 0.0) -> "SourceResult":
        return cls(
            source=source,
            articles=[],
            success=False,
            error=error,
            duration_seconds=duration_seconds,
        )


class AggregationResult(BaseModel):
    """Interleaved page plus per-source outcomes."""

    articles: list[Article] = Field(default_factory=list)
    total_results: int = 0
    source_results: list[SourceResult] = Field(default_factory=list)
