"""NewsData.io adapter."""

from typing import Any

from newsdeck.adapters.news_sources.base import UNSET, NewsSourceAdapter, setting_default
from newsdeck.adapters.news_sources.mapping import FieldMapping
from newsdeck.core.config import settings
from newsdeck.core.constants import Category, SourceName, search_domains_for
from newsdeck.core.exceptions import SourceFetchError


class NewsDataAdapter(NewsSourceAdapter):
    """Adapter for the NewsData.io ``/news`` endpoint.

    Free plans replace ``content`` with a paid-plan notice; those bodies are
    treated as missing and left to the content scraper.
    """

    source = SourceName.NEWSDATA
    display_name = "NewsData"

    CATEGORY_MAP = {
        Category.GENERAL: "top",
        Category.BUSINESS: "business",
        Category.SPORTS: "sports",
        Category.TECHNOLOGY: "technology",
        Category.ENTERTAINMENT: "entertainment",
        Category.POLITICS: "politics",
        Category.HEALTH: "health",
        Category.SCIENCE: "science",
    }
    DEFAULT_PROVIDER_CATEGORY = "top"

    FIELD_MAPPING = FieldMapping(
        title=("title",),
        summary=("description",),
        content=("content", "description"),
        image=("image_url",),
        source=("source_name", "source_id"),
        published_at=("pubDate",),
        url=("link",),
        external_id=("article_id",),
    )

    PLACEHOLDER_CONTENT = ("ONLY AVAILABLE IN PAID PLANS",)

    MAX_PAGE_SIZE = 50
    # domainurl accepts at most five domains
    MAX_DOMAINS = 5
    USES_SCRAPER = True

    def __init__(self, api_key: str | None = UNSET, **kwargs: Any) -> None:
        """Initialize NewsData adapter.

        Args:
            api_key: NewsData.io key (default from settings)
            **kwargs: Passed through to NewsSourceAdapter
        """
        kwargs.setdefault("base_url", settings.newsdata_base_url)
        super().__init__(api_key=setting_default(api_key, settings.newsdata_api_key), **kwargs)

    def build_params(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "apikey": self.api_key,
            "country": country,
            "language": "en",
            "category": self.provider_category(category),
            "size": page_size,
        }
        if search_query:
            params["q"] = search_query
            params["domainurl"] = ",".join(search_domains_for(category)[: self.MAX_DOMAINS])
        return params

    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        params = self.build_params(category, country, page_size, search_query)
        data = await self._get_json(f"{self.base_url}/news", params=params)

        if not isinstance(data, dict) or data.get("status") != "success":
            message = "unexpected payload"
            if isinstance(data, dict):
                results = data.get("results")
                message = results.get("message", "unknown error") if isinstance(results, dict) else "unknown error"
            raise SourceFetchError(f"NewsData error: {message}", source=self.source_name)

        results = data.get("results") or []
        return [item for item in results if isinstance(item, dict)]
