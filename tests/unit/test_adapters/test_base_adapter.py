"""Unit tests for the shared adapter pipeline in NewsSourceAdapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from newsdeck.adapters.news_sources.base import NewsSourceAdapter
from newsdeck.adapters.news_sources.mapping import FieldMapping
from newsdeck.core.constants import Category, SourceName
from newsdeck.core.exceptions import SourceFetchError
from newsdeck.services.relevance_filter import RelevanceFilter


class DummyAdapter(NewsSourceAdapter):
    """Adapter serving canned raw items."""

    source = SourceName.NEWSAPI
    display_name = "Dummy"
    FIELD_MAPPING = FieldMapping(
        title=("title",),
        summary=("description",),
        content=("content",),
        image=("image",),
        source=("publisher",),
        published_at=("published",),
        url=("url",),
    )
    USES_SCRAPER = True

    def __init__(self, items=None, error=None, **kwargs):
        super().__init__(api_key="test-key", **kwargs)
        self.items = items or []
        self.error = error
        self.requested_sizes = []

    async def fetch_items(self, category, country, page_size, search_query):
        self.requested_sizes.append(page_size)
        if self.error is not None:
            raise self.error
        return self.items


def raw_item(number, long_text, **overrides):
    item = {
        "title": f"Readable headline number {number}",
        "description": "A description that is longer than twenty characters.",
        "content": long_text,
        "image": f"https://img.example.com/{number}.jpg",
        "publisher": "Example Times",
        "published": f"2024-05-01T{10 + number:02d}:00:00Z",
        "url": f"https://example.com/story/{number}",
    }
    item.update(overrides)
    return item


@pytest.mark.asyncio
async def test_normalizes_items(long_text):
    adapter = DummyAdapter(items=[raw_item(1, long_text)])

    articles = await adapter.fetch(Category.BUSINESS, "gb", 5)

    assert len(articles) == 1
    article = articles[0]
    assert article.id.startswith("newsapi-")
    assert article.title == "Readable headline number 1"
    assert article.source == "Example Times"
    assert article.category == Category.BUSINESS
    assert article.image == "https://img.example.com/1.jpg"
    assert article.url == "https://example.com/story/1"
    assert article.read_time == "3 min read"
    assert article.is_video is False


@pytest.mark.asyncio
async def test_invalid_image_becomes_none(long_text):
    adapter = DummyAdapter(items=[raw_item(1, long_text, image="/static/placeholder.png")])

    articles = await adapter.fetch(Category.GENERAL, "gb", 5)

    assert articles[0].image is None


@pytest.mark.asyncio
async def test_quality_filter(long_text):
    items = [
        raw_item(1, long_text),
        raw_item(2, long_text, title=None),
        raw_item(3, long_text, title="Too short"),
        raw_item(4, "", description="Tiny"),
        raw_item(5, "", description="Only a summary but long enough to count"),
    ]
    adapter = DummyAdapter(items=items)

    articles = await adapter.fetch(Category.GENERAL, "gb", 10)

    assert [a.title for a in articles] == [
        "Readable headline number 5",
        "Readable headline number 1",
    ]
    for article in articles:
        assert article.title != "Untitled"
        assert len(article.title) > 10


@pytest.mark.asyncio
async def test_sorted_newest_first_and_truncated(long_text):
    adapter = DummyAdapter(items=[raw_item(n, long_text) for n in (1, 3, 2, 4)])

    articles = await adapter.fetch(Category.GENERAL, "gb", 2)

    assert [a.title for a in articles] == ["Readable headline number 4", "Readable headline number 3"]


@pytest.mark.asyncio
async def test_overfetch_request_size(long_text):
    adapter = DummyAdapter(items=[], overfetch_factor=3)

    await adapter.fetch(Category.GENERAL, "gb", 5)
    await adapter.fetch(Category.GENERAL, "gb", 50)

    assert adapter.requested_sizes == [15, 100]


@pytest.mark.asyncio
async def test_strips_truncation_marker(long_text):
    adapter = DummyAdapter(items=[raw_item(1, f"{long_text} [+2140 chars]")])

    articles = await adapter.fetch(Category.GENERAL, "gb", 5)

    assert articles[0].content == long_text


@pytest.mark.asyncio
async def test_malformed_items_are_skipped(long_text):
    adapter = DummyAdapter(items=[raw_item(1, long_text), "not a dict", raw_item(2, long_text)])

    articles = await adapter.fetch(Category.GENERAL, "gb", 5)

    assert len(articles) == 2


@pytest.mark.asyncio
async def test_relevance_filter_applies_to_search_queries(long_text):
    items = [
        raw_item(1, long_text, title="Nasdaq stocks close at record levels"),
        raw_item(2, long_text, title="Film premiere draws crowds to Leicester Square"),
    ]
    adapter = DummyAdapter(items=items, relevance_filter=RelevanceFilter())

    searched = await adapter.fetch(Category.BUSINESS, "gb", 5, search_query="stocks OR shares")
    unsearched = await adapter.fetch(Category.BUSINESS, "gb", 5)

    assert [a.title for a in searched] == ["Nasdaq stocks close at record levels"]
    assert len(unsearched) == 2


class TestFailures:
    """Failures become empty, failed results."""

    @pytest.mark.asyncio
    async def test_fetch_error(self):
        adapter = DummyAdapter(error=SourceFetchError("Dummy returned HTTP 503"))

        result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

        assert result.success is False
        assert result.articles == []
        assert result.error == "Dummy returned HTTP 503"

    @pytest.mark.asyncio
    async def test_unexpected_error(self):
        adapter = DummyAdapter(error=KeyError("items"))

        assert await adapter.fetch(Category.GENERAL, "gb", 5) == []

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        adapter = DummyAdapter()
        adapter.api_key = None

        result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

        assert result.success is False
        assert "not configured" in result.error
        assert adapter.requested_sizes == []


class TestScraperEnrichment:
    """Truncated content is replaced by longer scraped text."""

    @pytest.fixture
    def scraper(self, long_text):
        scraper = MagicMock()
        scraper.scrape = AsyncMock(return_value=long_text + " " + long_text)
        return scraper

    @pytest.mark.asyncio
    async def test_short_content_is_scraped(self, scraper, long_text):
        adapter = DummyAdapter(items=[raw_item(1, "Short body…")], scraper=scraper)

        articles = await adapter.fetch(Category.GENERAL, "gb", 5)

        scraper.scrape.assert_awaited_once_with("https://example.com/story/1")
        assert articles[0].content == long_text + " " + long_text
        assert articles[0].read_time == "5 min read"

    @pytest.mark.asyncio
    async def test_long_content_is_not_scraped(self, scraper, long_text):
        adapter = DummyAdapter(items=[raw_item(1, long_text)], scraper=scraper)

        await adapter.fetch(Category.GENERAL, "gb", 5)

        scraper.scrape.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scraped_text_shorter_than_native_is_ignored(self, long_text):
        scraper = MagicMock()
        scraper.scrape = AsyncMock(return_value="")
        native = "Native body that is short but still present in the feed."
        adapter = DummyAdapter(items=[raw_item(1, native)], scraper=scraper)

        articles = await adapter.fetch(Category.GENERAL, "gb", 5)

        assert articles[0].content == native

    @pytest.mark.asyncio
    async def test_scrape_limit(self, scraper, monkeypatch):
        from newsdeck.core.config import settings

        monkeypatch.setattr(settings, "scraper_max_articles", 2)
        adapter = DummyAdapter(items=[raw_item(n, "Short body.") for n in range(1, 6)], scraper=scraper)

        await adapter.fetch(Category.GENERAL, "gb", 5)

        assert scraper.scrape.await_count == 2

    @pytest.mark.asyncio
    async def test_stalled_scrape_keeps_native_content(self, long_text):
        async def scrape(url):
            if url.endswith("/2"):
                await asyncio.sleep(5)
            return long_text + " " + long_text

        scraper = MagicMock()
        scraper.scrape = AsyncMock(side_effect=scrape)
        items = [raw_item(1, "Short body one."), raw_item(2, "Short body two.")]
        adapter = DummyAdapter(items=items, scraper=scraper, scraper_budget=0.1)

        articles = await asyncio.wait_for(adapter.fetch(Category.GENERAL, "gb", 5), timeout=1.0)

        by_url = {a.url: a.content for a in articles}
        assert by_url["https://example.com/story/1"] == long_text + " " + long_text
        assert by_url["https://example.com/story/2"] == "Short body two."

    @pytest.mark.asyncio
    async def test_failed_scrape_keeps_native_content(self):
        scraper = MagicMock()
        scraper.scrape = AsyncMock(side_effect=RuntimeError("connection reset"))
        adapter = DummyAdapter(items=[raw_item(1, "Short body one.")], scraper=scraper)

        articles = await adapter.fetch(Category.GENERAL, "gb", 5)

        assert articles[0].content == "Short body one."
