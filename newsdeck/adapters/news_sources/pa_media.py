"""PA Media content API adapter."""

from collections.abc import Mapping
from typing import Any

from newsdeck.adapters.news_sources.base import UNSET, NewsSourceAdapter, setting_default
from newsdeck.adapters.news_sources.mapping import FieldMapping, lookup
from newsdeck.core.config import settings
from newsdeck.core.constants import Category, SourceName
from newsdeck.core.exceptions import SourceConfigurationError, SourceFetchError
from newsdeck.utils.formatting import validate_absolute_url


def _rendition_list(value: Any) -> list[Mapping[str, Any]]:
    """Renditions arrive either as a list or as a dict keyed by rendition name."""
    if isinstance(value, Mapping):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    return [r for r in value if isinstance(r, Mapping)]


def _rendition_url(rendition: Mapping[str, Any] | None) -> str | None:
    if rendition is None:
        return None
    return validate_absolute_url(rendition.get("href") or rendition.get("url"))


def _wider_than(rendition: Mapping[str, Any], width: int) -> bool:
    value = rendition.get("width")
    return isinstance(value, (int, float)) and value > width


def pick_rendition(renditions: list[Mapping[str, Any]], min_widths: tuple[int, ...]) -> Mapping[str, Any] | None:
    """First rendition wider than each threshold in turn, else the first one."""
    for width in min_widths:
        for rendition in renditions:
            if _wider_than(rendition, width):
                return rendition
    return renditions[0] if renditions else None


class PAMediaAdapter(NewsSourceAdapter):
    """Adapter for the PA Media (Press Association) content API.

    Several API keys may be configured. They are tried in order and the
    first key that gets a 2xx answer wins; the adapter fails only when every
    key fails.
    """

    source = SourceName.PA_MEDIA
    display_name = "PA Media"

    CATEGORY_MAP = {
        Category.SPORTS: "sport",
        Category.BUSINESS: "finance",
        Category.ENTERTAINMENT: "entertainment",
    }
    DEFAULT_PROVIDER_CATEGORY = ""

    # Categories PA Media has no feed for are searched by keyword
    KEYWORD_QUERIES = {
        Category.POLITICS: "politics government election",
        Category.TECHNOLOGY: "technology tech AI computer",
        Category.HEALTH: "health NHS medicine",
        Category.SCIENCE: "science research space",
    }

    FIELD_MAPPING = FieldMapping(
        title=("headline", "title", "name"),
        summary=("description_text", "description", "summary"),
        content=("body_text", "content", "body", "description_text"),
        published_at=("versioncreated", "published", "created_date"),
        url=("url", "link", "links.web"),
        external_id=("uri", "id"),
    )

    ITEM_CONTAINER_KEYS = ("item", "items", "data", "articles")
    MAX_PAGE_SIZE = 100

    def __init__(self, api_keys: list[str] | None = UNSET, **kwargs: Any) -> None:
        """Initialize PA Media adapter.

        Args:
            api_keys: API keys to try in order (default from settings)
            **kwargs: Passed through to NewsSourceAdapter
        """
        kwargs.setdefault("base_url", settings.pa_media_base_url)
        keys = setting_default(api_keys, settings.pa_media_api_keys) or []
        self.api_keys = [key for key in keys if key]
        super().__init__(api_key=self.api_keys[0] if self.api_keys else None, **kwargs)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_keys)

    def build_params(self, category: Category, page_size: int, search_query: str | None) -> dict[str, Any]:
        params: dict[str, Any] = {"format": "json", "size": page_size}

        provider_category = self.provider_category(category)
        if provider_category:
            params["category"] = provider_category
        elif category in self.KEYWORD_QUERIES:
            params["q"] = self.KEYWORD_QUERIES[category]

        if search_query:
            params["q"] = search_query
        return params

    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        params = self.build_params(category, page_size, search_query)
        headers = {"Accept": "application/json", "User-Agent": "NewsDeck/1.0"}

        last_error: SourceFetchError | None = None
        for position, api_key in enumerate(self.api_keys, start=1):
            try:
                data = await self._get_json(
                    f"{self.base_url}/item",
                    params={**params, "apikey": api_key},
                    headers=headers,
                )
            except SourceFetchError as e:
                self.logger.warning(
                    f"PA Media key {position}/{len(self.api_keys)} failed: {e}",
                    extra={"key_position": position},
                )
                last_error = e
                continue

            return self.extract_items(data)

        if last_error is None:
            raise SourceConfigurationError("PA Media API key not configured", source=self.source_name)
        raise SourceFetchError(
            f"All {len(self.api_keys)} PA Media API keys failed, last error: {last_error}",
            source=self.source_name,
        )

    def extract_items(self, data: Any) -> list[dict[str, Any]]:
        """Items from the first container key present in the payload."""
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]
        if not isinstance(data, dict):
            raise SourceFetchError("Unexpected PA Media payload", source=self.source_name)

        for key in self.ITEM_CONTAINER_KEYS:
            items = data.get(key)
            if isinstance(items, list):
                return [item for item in items if isinstance(item, dict)]
        return []

    def extract_image(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> str | None:
        # Feature image renditions, widest sensible first
        feature = _rendition_list(lookup(item, "associations.featureimage.renditions"))
        image = _rendition_url(pick_rendition(feature, (800, 400)))
        if image:
            return image

        direct = _rendition_list(item.get("renditions"))
        return _rendition_url(pick_rendition(direct, (400,)))

    def extract_source(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> str:
        return self.display_name
