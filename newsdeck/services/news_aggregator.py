"""News aggregation service.

This module provides the NewsAggregationService which fans one feed request
out to every enabled source adapter concurrently, isolates their failures,
drops cross-source duplicates and interleaves the survivors into one page.
"""

import asyncio
import time
from collections.abc import Mapping

from newsdeck.adapters.news_sources import (
    BraveSearchAdapter,
    NewsAPIAdapter,
    NewsDataAdapter,
    NewsSourceAdapter,
    PAMediaAdapter,
    YouTubeAdapter,
)
from newsdeck.core.config import Settings
from newsdeck.core.config import settings as default_settings
from newsdeck.core.constants import SourceName
from newsdeck.models.domain.article import AggregationRequest, AggregationResult, Article, SourceResult
from newsdeck.services.content_scraper import ContentScraper
from newsdeck.services.interleaver import interleave
from newsdeck.services.relevance_filter import RelevanceFilter
from newsdeck.services.source_mix import SourceMixPolicy
from newsdeck.utils.formatting import collapse_whitespace
from newsdeck.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


def build_adapters(
    config: Settings | None = None,
    scraper: ContentScraper | None = None,
    relevance_filter: RelevanceFilter | None = None,
) -> dict[SourceName, NewsSourceAdapter]:
    """Create one adapter per supported source from configuration.

    Credentials come from ``config`` only: a key missing there leaves the
    adapter unconfigured even if the global settings carry one. Adapters
    without credentials are still created; they report a configuration
    failure when called.
    """
    config = config or default_settings
    if config.scraper_enabled:
        scraper = scraper or ContentScraper(
            timeout=config.scraper_timeout,
            user_agent=config.scraper_user_agent,
        )
    else:
        scraper = None
    relevance_filter = relevance_filter or RelevanceFilter()
    common = {
        "timeout": config.http_timeout,
        "overfetch_factor": config.source_overfetch_factor,
        "scraper_budget": config.scraper_budget,
        "relevance_filter": relevance_filter,
    }

    adapters: list[NewsSourceAdapter] = [
        NewsAPIAdapter(api_key=config.newsapi_key, base_url=config.newsapi_base_url, scraper=scraper, **common),
        PAMediaAdapter(api_keys=config.pa_media_api_keys, base_url=config.pa_media_base_url, **common),
        NewsDataAdapter(
            api_key=config.newsdata_api_key,
            base_url=config.newsdata_base_url,
            scraper=scraper,
            **common,
        ),
        YouTubeAdapter(api_key=config.youtube_api_key, base_url=config.youtube_base_url, **common),
        BraveSearchAdapter(
            api_key=config.brave_search_api_key,
            base_url=config.brave_search_base_url,
            **common,
        ),
    ]
    return {adapter.source: adapter for adapter in adapters}


def _title_key(article: Article) -> str:
    return collapse_whitespace(article.title).lower()


class NewsAggregationService:
    """Service producing one interleaved feed page per request.

    Attributes:
        adapters: Source adapters keyed by source
        policy: Source mix policy (target fractions and interleaving rules)
        adapter_timeout: Upper bound in seconds for each adapter call
    """

    def __init__(
        self,
        adapters: Mapping[SourceName, NewsSourceAdapter],
        policy: SourceMixPolicy | None = None,
        adapter_timeout: float | None = None,
    ) -> None:
        """Initialize the aggregation service.

        Args:
            adapters: Source adapters keyed by source
            policy: Source mix policy (default policy when omitted)
            adapter_timeout: Per-adapter timeout (default from settings)
        """
        self.adapters = dict(adapters)
        self.policy = policy or SourceMixPolicy.default()
        self.adapter_timeout = adapter_timeout or default_settings.adapter_timeout

        logger.info(
            f"Initialized NewsAggregationService with {len(self.adapters)} adapters",
            extra={"sources": [source.value for source in self.adapters]},
        )

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "NewsAggregationService":
        config = config or default_settings
        return cls(
            adapters=build_adapters(config),
            policy=SourceMixPolicy.from_settings(config),
            adapter_timeout=config.adapter_timeout,
        )

    async def aggregate(self, request: AggregationRequest) -> list[Article]:
        """Return the interleaved page for ``request``."""
        result = await self.run(request)
        return result.articles

    async def run(self, request: AggregationRequest) -> AggregationResult:
        """Fetch, merge and interleave articles for one request.

        Every enabled adapter is started at once and the call waits for all
        of them to settle. Adapter failures and timeouts leave that source
        empty; when every source is empty the result is an empty page.

        Args:
            request: Normalized aggregation request

        Returns:
            AggregationResult with the page, the number of distinct articles
            fetched and the per-source outcomes
        """
        with LogContext(request_id=request.request_id):
            start = time.perf_counter()

            policy = self.policy
            if request.source_selector is not None:
                policy = policy.restricted_to(request.source_selector)

            targets = {
                source: count
                for source, count in policy.target_counts(request.page_size).items()
                if source in self.adapters
            }

            logger.info(
                "Starting aggregation",
                extra={
                    "category": request.category.value,
                    "country": request.country,
                    "page_size": request.page_size,
                    "search_query": request.search_query,
                    "targets": {source.value: count for source, count in targets.items()},
                },
            )

            source_results = await asyncio.gather(
                *(self._fetch_source(source, count, request) for source, count in targets.items())
            )

            source_lists = self._deduplicate(policy, source_results)
            articles = interleave(source_lists, request.page_size, policy)
            total_results = sum(len(items) for items in source_lists.values())

            duration = time.perf_counter() - start
            if not articles:
                logger.warning(
                    "No articles from any source",
                    extra={
                        "failed_sources": [r.source.value for r in source_results if not r.success],
                        "duration_seconds": round(duration, 3),
                    },
                )
            else:
                logger.info(
                    f"Aggregated {len(articles)} articles",
                    extra={
                        "article_count": len(articles),
                        "total_results": total_results,
                        "by_source": {r.source.value: len(r.articles) for r in source_results},
                        "duration_seconds": round(duration, 3),
                    },
                )

            return AggregationResult(
                articles=articles,
                total_results=total_results,
                source_results=list(source_results),
            )

    async def _fetch_source(
        self,
        source: SourceName,
        target_count: int,
        request: AggregationRequest,
    ) -> SourceResult:
        """Run one adapter under the per-adapter timeout; never raises."""
        adapter = self.adapters[source]
        start = time.perf_counter()

        try:
            return await asyncio.wait_for(
                adapter.fetch_result(
                    request.category,
                    request.country,
                    target_count,
                    request.search_query,
                ),
                timeout=self.adapter_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Adapter {source.value} timed out after {self.adapter_timeout}s",
                extra={"adapter": source.value, "outcome": "timeout"},
            )
            return SourceResult.failed(source, "timeout", time.perf_counter() - start)
        except Exception as e:
            logger.error(
                f"Adapter {source.value} raised: {e}",
                exc_info=True,
                extra={"adapter": source.value, "outcome": "failed"},
            )
            return SourceResult.failed(source, str(e), time.perf_counter() - start)

    @staticmethod
    def _deduplicate(
        policy: SourceMixPolicy,
        source_results: list[SourceResult],
    ) -> dict[SourceName, list[Article]]:
        """Drop repeated titles across sources, first source in fallback order wins."""
        by_source = {result.source: result.articles for result in source_results}
        order = [s for s in policy.fallback_order if s in by_source]
        order.extend(s for s in by_source if s not in order)

        seen: set[str] = set()
        lists: dict[SourceName, list[Article]] = {}
        for source in order:
            kept = []
            for article in by_source[source]:
                key = _title_key(article)
                if key in seen:
                    continue
                seen.add(key)
                kept.append(article)
            lists[source] = kept

        return lists
