"""NewsAPI.org adapter.

Headlines come from ``/top-headlines`` (country + category). Keyword
searches, and categories NewsAPI has no headline feed for, go through
``/everything`` restricted to the allow-listed publishers.
"""

from typing import Any

from newsdeck.adapters.news_sources.base import UNSET, NewsSourceAdapter, setting_default
from newsdeck.adapters.news_sources.mapping import FieldMapping
from newsdeck.core.config import settings
from newsdeck.core.constants import (
    CATEGORY_KEYWORD_QUERIES,
    Category,
    SourceName,
    search_domains_for,
)
from newsdeck.core.exceptions import SourceFetchError


class NewsAPIAdapter(NewsSourceAdapter):
    """Adapter for the NewsAPI.org v2 REST API.

    Note: NewsAPI truncates ``content`` to about 200 characters and appends
    a ``[+N chars]`` marker, so this adapter relies on the content scraper.
    """

    source = SourceName.NEWSAPI
    display_name = "NewsAPI"

    CATEGORY_MAP = {
        Category.GENERAL: "general",
        Category.BUSINESS: "business",
        Category.SPORTS: "sports",
        Category.TECHNOLOGY: "technology",
        Category.ENTERTAINMENT: "entertainment",
        Category.HEALTH: "health",
        Category.SCIENCE: "science",
    }
    DEFAULT_PROVIDER_CATEGORY = "general"

    FIELD_MAPPING = FieldMapping(
        title=("title",),
        summary=("description",),
        content=("content", "description"),
        image=("urlToImage",),
        source=("source.name",),
        published_at=("publishedAt",),
        url=("url",),
    )

    MAX_PAGE_SIZE = 100
    USES_SCRAPER = True

    # Categories without a headline feed, searched by keyword instead
    KEYWORD_CATEGORIES = frozenset({Category.POLITICS})

    # Keeps US leagues out of UK sports headlines
    UK_SPORTS_QUERY = '-NFL -NBA -MLB football OR tennis OR rugby OR cricket OR "Premier League" OR "Formula 1"'

    def __init__(self, api_key: str | None = UNSET, **kwargs: Any) -> None:
        """Initialize NewsAPI adapter.

        Args:
            api_key: NewsAPI key (default from settings)
            **kwargs: Passed through to NewsSourceAdapter
        """
        kwargs.setdefault("base_url", settings.newsapi_base_url)
        super().__init__(api_key=setting_default(api_key, settings.newsapi_key), **kwargs)

    def build_request(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> tuple[str, dict[str, Any]]:
        """Pick the endpoint and query parameters for one fetch.

        Returns:
            Tuple of (endpoint URL, query parameters)
        """
        params: dict[str, Any] = {"pageSize": page_size}

        if search_query or category in self.KEYWORD_CATEGORIES:
            params.update(
                {
                    "q": search_query or CATEGORY_KEYWORD_QUERIES[category],
                    "sortBy": "publishedAt",
                    "language": "en",
                    "domains": ",".join(search_domains_for(category)),
                }
            )
            return f"{self.base_url}/everything", params

        params["country"] = country
        params["category"] = self.provider_category(category)
        if category == Category.SPORTS and country == "gb":
            params["q"] = self.UK_SPORTS_QUERY
        return f"{self.base_url}/top-headlines", params

    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        url, params = self.build_request(category, country, page_size, search_query)
        self.logger.debug(
            f"Requesting NewsAPI {url.rsplit('/', 1)[-1]}",
            extra={"provider_category": params.get("category"), "query": params.get("q")},
        )

        # Key goes in a header so it never appears in logged URLs
        data = await self._get_json(url, params=params, headers={"X-Api-Key": self.api_key or ""})

        if not isinstance(data, dict) or data.get("status") != "ok":
            message = data.get("message", "unknown error") if isinstance(data, dict) else "unexpected payload"
            raise SourceFetchError(f"NewsAPI error: {message}", source=self.source_name)

        articles = data.get("articles") or []
        return [item for item in articles if isinstance(item, dict)]
