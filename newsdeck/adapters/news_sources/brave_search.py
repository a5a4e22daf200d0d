"""Brave Search news adapter."""

from collections.abc import Mapping
from typing import Any

from newsdeck.adapters.news_sources.base import UNSET, NewsSourceAdapter, setting_default
from newsdeck.adapters.news_sources.mapping import FieldMapping
from newsdeck.core.config import settings
from newsdeck.core.constants import (
    CATEGORY_KEYWORD_QUERIES,
    Category,
    SourceName,
    is_allowed_domain,
)
from newsdeck.core.exceptions import SourceFetchError
from newsdeck.utils.formatting import clean_text, estimate_read_time, hostname_of


class BraveSearchAdapter(NewsSourceAdapter):
    """Adapter for the Brave Search ``/news/search`` endpoint.

    Results are relevance ordered by Brave and keep that order. With a
    search query, results from publishers outside the category allow-list
    are dropped before normalization.
    """

    source = SourceName.BRAVE
    display_name = "Brave Search"

    FIELD_MAPPING = FieldMapping(
        title=("title",),
        summary=("description",),
        content=("description",),
        image=("thumbnail.src", "thumbnail.original"),
        source=("meta_url.hostname", "profile.name"),
        published_at=("page_age", "age"),
        url=("url",),
    )

    MAX_PAGE_SIZE = 50
    SORT_BY_PUBLISHED = False

    def __init__(self, api_key: str | None = UNSET, **kwargs: Any) -> None:
        """Initialize Brave Search adapter.

        Args:
            api_key: Brave Search subscription token (default from settings)
            **kwargs: Passed through to NewsSourceAdapter
        """
        kwargs.setdefault("base_url", settings.brave_search_base_url)
        super().__init__(api_key=setting_default(api_key, settings.brave_search_api_key), **kwargs)

    def provider_category(self, category: Category) -> str:
        return CATEGORY_KEYWORD_QUERIES.get(category, CATEGORY_KEYWORD_QUERIES[Category.GENERAL])

    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        params = {
            "q": search_query or self.provider_category(category),
            "count": page_size,
            "country": country,
            "search_lang": "en",
            "extra_snippets": "true",
        }
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key or "",
        }
        data = await self._get_json(f"{self.base_url}/news/search", params=params, headers=headers)
        if not isinstance(data, dict):
            raise SourceFetchError("Unexpected Brave Search payload", source=self.source_name)

        results = [item for item in data.get("results") or [] if isinstance(item, dict)]
        if not search_query:
            return results

        allowed = [item for item in results if is_allowed_domain(hostname_of(item.get("url")), category)]
        self.logger.debug(f"Brave Search allow-list kept {len(allowed)}/{len(results)} results")
        return allowed

    def extract_source(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> str:
        return hostname_of(item.get("url")) or clean_text(fields["source"]) or self.display_name

    def extra_fields(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> dict[str, Any]:
        snippets = item.get("extra_snippets")
        if not isinstance(snippets, list) or not snippets:
            return {}

        parts = [clean_text(fields["content"])] + [clean_text(snippet) for snippet in snippets]
        content = " ".join(part for part in parts if part)
        return {"content": content, "read_time": estimate_read_time(content)}
