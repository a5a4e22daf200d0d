"""YouTube Data API v3 adapter producing video articles."""

from collections.abc import Mapping
from typing import Any

from newsdeck.adapters.news_sources.base import UNSET, NewsSourceAdapter, setting_default
from newsdeck.adapters.news_sources.mapping import FieldMapping, lookup
from newsdeck.core.config import settings
from newsdeck.core.constants import VIDEO_READ_TIME_FALLBACK, Category, SourceName
from newsdeck.core.exceptions import SourceFetchError
from newsdeck.models.domain.article import Article
from newsdeck.utils.formatting import format_duration, parse_iso8601_duration, validate_absolute_url

EMBED_URL = "https://www.youtube.com/embed/{video_id}"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# Key under which the looked-up duration is attached to a search item
DURATION_KEY = "durationSeconds"


class YouTubeAdapter(NewsSourceAdapter):
    """Adapter for YouTube news videos.

    Two calls per fetch: ``/search`` for recent embeddable videos, then
    ``/videos?part=contentDetails`` for their durations. A failed duration
    lookup is not fatal; the videos are returned with ``readTime = "Video"``.
    """

    source = SourceName.YOUTUBE
    display_name = "YouTube"

    # YouTube has no news categories; each category is a keyword query
    CATEGORY_MAP = {
        Category.GENERAL: "news today",
        Category.BUSINESS: "business news markets",
        Category.SPORTS: "sports news highlights",
        Category.TECHNOLOGY: "technology news",
        Category.ENTERTAINMENT: "entertainment news",
        Category.POLITICS: "politics news",
        Category.HEALTH: "health news",
        Category.SCIENCE: "science news",
    }
    DEFAULT_PROVIDER_CATEGORY = "news"

    FIELD_MAPPING = FieldMapping(
        title=("snippet.title",),
        summary=("snippet.description",),
        content=("snippet.description",),
        image=(
            "snippet.thumbnails.high.url",
            "snippet.thumbnails.medium.url",
            "snippet.thumbnails.default.url",
        ),
        source=("snippet.channelTitle",),
        published_at=("snippet.publishedAt",),
        external_id=("id.videoId",),
    )

    MAX_PAGE_SIZE = 50

    def __init__(self, api_key: str | None = UNSET, **kwargs: Any) -> None:
        """Initialize YouTube adapter.

        Args:
            api_key: YouTube Data API key (default from settings)
            **kwargs: Passed through to NewsSourceAdapter
        """
        kwargs.setdefault("base_url", settings.youtube_base_url)
        super().__init__(api_key=setting_default(api_key, settings.youtube_api_key), **kwargs)

    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        params = {
            "part": "snippet",
            "type": "video",
            "order": "date",
            "videoEmbeddable": "true",
            "regionCode": country.upper(),
            "relevanceLanguage": "en",
            "maxResults": page_size,
            "q": search_query or self.provider_category(category),
            "key": self.api_key,
        }
        data = await self._get_json(f"{self.base_url}/search", params=params)
        if not isinstance(data, dict):
            raise SourceFetchError("Unexpected YouTube search payload", source=self.source_name)

        items = [item for item in data.get("items") or [] if isinstance(item, dict)]
        video_ids = [vid for vid in (self.FIELD_MAPPING.resolve(item, "external_id") for item in items) if vid]
        if not video_ids:
            return items

        durations = await self.fetch_durations(video_ids)
        return [
            {**item, DURATION_KEY: durations.get(self.FIELD_MAPPING.resolve(item, "external_id"))}
            for item in items
        ]

    async def fetch_durations(self, video_ids: list[str]) -> dict[str, int]:
        """Duration in seconds per video id; empty when the lookup fails."""
        params = {"part": "contentDetails", "id": ",".join(video_ids), "key": self.api_key}
        try:
            data = await self._get_json(f"{self.base_url}/videos", params=params)
        except SourceFetchError as e:
            self.logger.warning(f"YouTube duration lookup failed, using fallback read time: {e}")
            return {}

        videos = data.get("items") if isinstance(data, dict) else None
        durations: dict[str, int] = {}
        for video in videos or []:
            if not isinstance(video, dict):
                continue
            seconds = parse_iso8601_duration(lookup(video, "contentDetails.duration"))
            if video.get("id") and seconds is not None:
                durations[video["id"]] = seconds
        return durations

    def extra_fields(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> dict[str, Any]:
        video_id = fields["external_id"]
        if not isinstance(video_id, str) or not video_id:
            raise ValueError("search result without a video id")

        seconds = item.get(DURATION_KEY)
        thumbnail = validate_absolute_url(fields["image"])
        return {
            "url": WATCH_URL.format(video_id=video_id),
            "read_time": format_duration(seconds) if isinstance(seconds, int) else VIDEO_READ_TIME_FALLBACK,
            "is_video": True,
            "video_id": video_id,
            "embed_url": EMBED_URL.format(video_id=video_id),
            "video_thumbnail": thumbnail,
        }

    def passes_quality_filter(self, article: Article) -> bool:
        # Video descriptions are often empty; the title alone qualifies
        return self.has_real_title(article)
