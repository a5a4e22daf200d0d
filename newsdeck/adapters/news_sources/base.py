"""Base news source adapter interface.

This module defines the abstract base class for all news source adapters,
providing a consistent interface for fetching articles from different
providers and the shared normalization, enrichment and filtering pipeline.
"""

import asyncio
import re
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import httpx

from newsdeck.adapters.news_sources.mapping import FieldMapping
from newsdeck.core.config import settings
from newsdeck.core.constants import (
    DEFAULT_TITLE,
    MIN_CONTENT_LENGTH,
    MIN_SUMMARY_LENGTH,
    MIN_TITLE_LENGTH,
    Category,
    SourceName,
)
from newsdeck.core.exceptions import (
    NewsSourceError,
    SourceConfigurationError,
    SourceFetchError,
)
from newsdeck.models.domain.article import Article, SourceResult
from newsdeck.services.content_scraper import ContentScraper
from newsdeck.services.relevance_filter import RelevanceFilter
from newsdeck.utils.formatting import (
    clean_text,
    estimate_read_time,
    parse_published_at,
    validate_absolute_url,
)
from newsdeck.utils.logging import get_logger

_CHARS_MARKER_RE = re.compile(r"\s*\[\+\d+ chars\]\s*$")

# Default for constructor arguments that fall back to the global settings.
# An explicit None (or empty key list) means "not configured".
UNSET: Any = object()


def setting_default(value: Any, default: Any) -> Any:
    return default if value is UNSET else value


class NewsSourceAdapter(ABC):
    """Abstract base class for news source adapters.

    All provider implementations inherit from this class and implement
    ``fetch_items`` to call their API. The base class turns the raw items
    into articles (``FIELD_MAPPING``), enriches truncated bodies through the
    content scraper, applies the quality and relevance filters, orders and
    truncates the list.

    ``fetch`` and ``fetch_result`` never raise: configuration errors,
    provider failures and unexpected exceptions all end up as an empty,
    failed result for this source.

    Attributes:
        source: Source identifier
        display_name: Human-readable provider name
        api_key: Provider credential
        timeout: HTTP request timeout in seconds
        overfetch_factor: Multiplier on the target count requested upstream
        scraper: Content scraper for truncated bodies (optional)
        relevance_filter: Filter applied when a search query is given
    """

    source: ClassVar[SourceName]
    display_name: ClassVar[str]

    CATEGORY_MAP: ClassVar[Mapping[Category, str]] = {}
    DEFAULT_PROVIDER_CATEGORY: ClassVar[str] = "general"
    FIELD_MAPPING: ClassVar[FieldMapping] = FieldMapping()
    MAX_PAGE_SIZE: ClassVar[int] = 100
    SORT_BY_PUBLISHED: ClassVar[bool] = True
    USES_SCRAPER: ClassVar[bool] = False
    REQUIRES_API_KEY: ClassVar[bool] = True

    # Content values providers send instead of the real body
    PLACEHOLDER_CONTENT: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        overfetch_factor: int | None = None,
        scraper: ContentScraper | None = None,
        relevance_filter: RelevanceFilter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        scraper_budget: float | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: Provider credential
            base_url: Provider base URL
            timeout: HTTP request timeout (default from settings)
            overfetch_factor: Upstream over-fetch multiplier (default from settings)
            scraper: Content scraper used for truncated content
            relevance_filter: Relevance filter for search queries
            transport: Optional httpx transport, used by tests
            scraper_budget: Seconds allowed for all scraping in one call
                (default from settings)
        """
        self.api_key = api_key
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.overfetch_factor = (
            overfetch_factor if overfetch_factor is not None else settings.source_overfetch_factor
        )
        self.scraper_budget = scraper_budget if scraper_budget is not None else settings.scraper_budget
        self.scraper = scraper
        self.relevance_filter = relevance_filter
        self._transport = transport
        self.logger = get_logger(type(self).__module__, extra={"adapter": self.source_name})

    @property
    def source_name(self) -> str:
        return self.source.value

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or not self.REQUIRES_API_KEY

    def provider_category(self, category: Category) -> str:
        """Provider vocabulary for a normalized category."""
        return self.CATEGORY_MAP.get(category, self.DEFAULT_PROVIDER_CATEGORY)

    async def fetch(
        self,
        category: Category,
        country: str,
        target_count: int,
        search_query: str | None = None,
    ) -> list[Article]:
        """Fetch up to ``target_count`` articles; empty on any failure."""
        result = await self.fetch_result(category, country, target_count, search_query)
        return result.articles

    async def fetch_result(
        self,
        category: Category,
        country: str,
        target_count: int,
        search_query: str | None = None,
    ) -> SourceResult:
        """Fetch articles and report success or the cause of failure.

        Args:
            category: Normalized category
            country: Two-letter country code
            target_count: Articles wanted from this source
            search_query: Optional free-text query

        Returns:
            SourceResult with the articles (empty when the adapter failed)
        """
        start = time.perf_counter()

        try:
            articles = await self._collect(category, country, target_count, search_query)
        except SourceConfigurationError as e:
            self.logger.warning(
                f"{self.display_name} not configured: {e}",
                extra={"outcome": "not_configured"},
            )
            return SourceResult.failed(self.source, str(e), time.perf_counter() - start)
        except NewsSourceError as e:
            self.logger.error(
                f"{self.display_name} fetch failed: {e}",
                extra={"outcome": "failed"},
            )
            return SourceResult.failed(self.source, str(e), time.perf_counter() - start)
        except Exception as e:
            self.logger.error(
                f"Unexpected error in {self.display_name} adapter: {e}",
                exc_info=True,
                extra={"outcome": "failed"},
            )
            return SourceResult.failed(self.source, f"unexpected error: {e}", time.perf_counter() - start)

        duration = time.perf_counter() - start
        self.logger.info(
            f"Fetched {len(articles)} articles from {self.display_name}",
            extra={
                "outcome": "ok",
                "article_count": len(articles),
                "target_count": target_count,
                "duration_seconds": round(duration, 3),
            },
        )
        return SourceResult(source=self.source, articles=articles, duration_seconds=duration)

    async def _collect(
        self,
        category: Category,
        country: str,
        target_count: int,
        search_query: str | None,
    ) -> list[Article]:
        if target_count <= 0:
            return []

        self.ensure_configured()

        request_size = min(self.MAX_PAGE_SIZE, target_count * self.overfetch_factor)
        raw_items = await self.fetch_items(category, country, request_size, search_query)

        articles: list[Article] = []
        for index, item in enumerate(raw_items):
            article = self.normalize_item(item, category, index)
            if article is not None:
                articles.append(article)

        articles = await self.enrich_content(articles)

        fetched = len(articles)
        articles = [a for a in articles if self.passes_quality_filter(a)]
        if search_query and self.relevance_filter is not None:
            articles = self.relevance_filter.filter(articles, search_query)

        self.logger.debug(
            f"{self.display_name}: kept {len(articles)}/{fetched} after filtering",
            extra={"raw_count": len(raw_items)},
        )

        if self.SORT_BY_PUBLISHED:
            articles.sort(key=lambda a: a.published_at, reverse=True)

        return articles[:target_count]

    def ensure_configured(self) -> None:
        """Raise SourceConfigurationError when the credential is missing."""
        if not self.is_configured:
            raise SourceConfigurationError(
                f"{self.display_name} API key not configured",
                source=self.source_name,
            )

    @abstractmethod
    async def fetch_items(
        self,
        category: Category,
        country: str,
        page_size: int,
        search_query: str | None,
    ) -> list[dict[str, Any]]:
        """Call the provider and return its raw items.

        Must be implemented by every concrete adapter.

        Raises:
            SourceFetchError: On network, HTTP or payload errors
        """
        pass

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """GET a JSON document from the provider.

        Raises:
            SourceFetchError: On transport errors, non-2xx status or invalid JSON
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            raise SourceFetchError(
                f"{self.display_name} returned HTTP {e.response.status_code}",
                source=self.source_name,
            ) from e
        except httpx.HTTPError as e:
            raise SourceFetchError(
                f"Failed to reach {self.display_name}: {type(e).__name__}",
                source=self.source_name,
            ) from e
        except ValueError as e:
            raise SourceFetchError(
                f"Malformed JSON from {self.display_name}: {e}",
                source=self.source_name,
            ) from e

    def normalize_item(
        self,
        item: Mapping[str, Any],
        category: Category,
        index: int,
    ) -> Article | None:
        """Map one raw provider item onto the Article model.

        Returns:
            Article, or None when the item cannot be represented
        """
        if not isinstance(item, Mapping):
            return None

        try:
            fields = self.FIELD_MAPPING.resolve_all(item)

            title = clean_text(fields["title"]) or DEFAULT_TITLE
            summary = clean_text(fields["summary"])
            content = self.clean_content(fields["content"]) or summary

            values: dict[str, Any] = {
                "id": self.make_id(),
                "title": title,
                "summary": summary,
                "content": content,
                "image": self.extract_image(item, fields),
                "source": self.extract_source(item, fields),
                "category": category,
                "published_at": parse_published_at(fields["published_at"]),
                "read_time": estimate_read_time(content),
                "url": validate_absolute_url(fields["url"]),
            }
            values.update(self.extra_fields(item, fields))
            return Article(**values)

        except (ValueError, TypeError) as e:
            self.logger.debug(f"Skipping malformed {self.display_name} item {index}: {e}")
            return None

    def make_id(self) -> str:
        return f"{self.source_name}-{uuid.uuid4().hex[:12]}"

    def clean_content(self, value: Any) -> str:
        """Body text without provider truncation markers or placeholders."""
        content = clean_text(value)
        if content.upper() in self.PLACEHOLDER_CONTENT:
            return ""
        return _CHARS_MARKER_RE.sub("", content).strip()

    def extract_image(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> str | None:
        return validate_absolute_url(fields["image"])

    def extract_source(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> str:
        return clean_text(fields["source"]) or self.display_name

    def extra_fields(self, item: Mapping[str, Any], fields: Mapping[str, Any]) -> dict[str, Any]:
        """Article fields overriding or extending the mapped ones; none by default."""
        return {}

    def needs_enrichment(self, article: Article) -> bool:
        """True when the body looks truncated or too short to read."""
        content = article.content
        if len(content) < settings.scraper_min_content_length:
            return True
        return content.endswith(("…", "..."))

    async def enrich_content(self, articles: list[Article]) -> list[Article]:
        """Replace truncated bodies with scraped text when it is longer.

        All pages are fetched concurrently under ``scraper_budget``. Pages
        still loading when the budget runs out are cancelled and their
        articles keep the native content.
        """
        if not (self.USES_SCRAPER and self.scraper is not None and settings.scraper_enabled):
            return articles

        candidates = [
            index
            for index, article in enumerate(articles)
            if article.url and self.needs_enrichment(article)
        ][: settings.scraper_max_articles]
        if not candidates:
            return articles

        tasks = {asyncio.ensure_future(self.scraper.scrape(articles[i].url)): i for i in candidates}
        done, pending = await asyncio.wait(tasks, timeout=self.scraper_budget)

        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            self.logger.warning(
                f"Scraper budget of {self.scraper_budget}s exhausted, "
                f"{len(pending)}/{len(candidates)} {self.display_name} pages left unenriched",
                extra={"outcome": "scraper_timeout"},
            )

        enriched = list(articles)
        improved = 0
        for task in done:
            if task.exception() is not None:
                self.logger.debug(f"Scrape failed: {task.exception()}")
                continue
            index, text = tasks[task], task.result()
            if len(text) > len(enriched[index].content):
                enriched[index] = enriched[index].model_copy(
                    update={"content": text, "read_time": estimate_read_time(text)}
                )
                improved += 1

        self.logger.debug(f"Scraper enriched {improved}/{len(candidates)} {self.display_name} articles")
        return enriched

    def passes_quality_filter(self, article: Article) -> bool:
        """Real title plus either a substantial body or a substantial summary."""
        if not self.has_real_title(article):
            return False
        return len(article.content) > MIN_CONTENT_LENGTH or len(article.summary) > MIN_SUMMARY_LENGTH

    @staticmethod
    def has_real_title(article: Article) -> bool:
        return article.title != DEFAULT_TITLE and len(article.title) > MIN_TITLE_LENGTH
