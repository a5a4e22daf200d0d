"""Unit tests for the NewsAPI adapter."""

import httpx
import pytest

from newsdeck.adapters.news_sources.newsapi import NewsAPIAdapter
from newsdeck.core.constants import Category


def newsapi_payload(long_text):
    return {
        "status": "ok",
        "totalResults": 3,
        "articles": [
            {
                "source": {"id": "bbc-news", "name": "BBC News"},
                "title": "Bank of England holds interest rates at 5.25%",
                "description": "The Bank of England has held rates for a sixth time in a row.",
                "url": "https://www.bbc.co.uk/news/business-1",
                "urlToImage": "https://ichef.bbci.co.uk/news/1.jpg",
                "publishedAt": "2024-05-01T09:00:00Z",
                "content": f"{long_text} [+3120 chars]",
            },
            {
                "source": {"id": None, "name": "Reuters"},
                "title": "Oil prices climb as supply concerns return to markets",
                "description": "Brent crude rose two percent in early Asian trade on Wednesday.",
                "url": "https://www.reuters.com/markets/2",
                "urlToImage": None,
                "publishedAt": "2024-05-01T11:00:00Z",
                "content": None,
            },
            {
                "source": {"id": None, "name": "[Removed]"},
                "title": "[Removed]",
                "description": "[Removed]",
                "url": "https://removed.com",
                "urlToImage": None,
                "publishedAt": "1970-01-01T00:00:00Z",
                "content": "[Removed]",
            },
        ],
    }


@pytest.mark.asyncio
async def test_top_headlines_request(json_transport, long_text):
    requests = []
    adapter = NewsAPIAdapter(api_key="news-key", transport=json_transport(newsapi_payload(long_text), requests=requests))

    articles = await adapter.fetch(Category.BUSINESS, "gb", 5)

    request = requests[0]
    assert request.url.path == "/v2/top-headlines"
    assert request.url.params["country"] == "gb"
    assert request.url.params["category"] == "business"
    assert request.url.params["pageSize"] == "10"
    assert request.headers["X-Api-Key"] == "news-key"
    assert "news-key" not in str(request.url)

    assert [a.source for a in articles] == ["Reuters", "BBC News"]
    assert articles[1].content == long_text
    assert articles[1].image == "https://ichef.bbci.co.uk/news/1.jpg"
    assert articles[0].image is None
    assert articles[0].content == "Brent crude rose two percent in early Asian trade on Wednesday."


@pytest.mark.asyncio
async def test_search_uses_everything_with_domains(json_transport, long_text):
    requests = []
    adapter = NewsAPIAdapter(api_key="k", transport=json_transport(newsapi_payload(long_text), requests=requests))

    await adapter.fetch(Category.BUSINESS, "gb", 5, search_query="interest rates")

    params = requests[0].url.params
    assert requests[0].url.path == "/v2/everything"
    assert params["q"] == "interest rates"
    assert params["sortBy"] == "publishedAt"
    assert params["language"] == "en"
    assert "bbc.co.uk" in params["domains"].split(",")
    assert "country" not in params


@pytest.mark.asyncio
async def test_politics_uses_keyword_query(json_transport, long_text):
    requests = []
    adapter = NewsAPIAdapter(api_key="k", transport=json_transport(newsapi_payload(long_text), requests=requests))

    await adapter.fetch(Category.POLITICS, "gb", 5)

    assert requests[0].url.path == "/v2/everything"
    assert requests[0].url.params["q"] == "politics OR government OR election OR parliament"


def test_uk_sports_excludes_us_leagues():
    adapter = NewsAPIAdapter(api_key="k")

    _, uk = adapter.build_request(Category.SPORTS, "gb", 10, None)
    _, us = adapter.build_request(Category.SPORTS, "us", 10, None)

    assert uk["q"].startswith("-NFL -NBA -MLB")
    assert "q" not in us


def test_unmapped_category_uses_general():
    adapter = NewsAPIAdapter(api_key="k")

    assert adapter.provider_category(Category.GENERAL) == "general"
    assert adapter.provider_category(Category.POLITICS) == "general"


@pytest.mark.asyncio
async def test_error_status_fails_the_source(json_transport):
    payload = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."}
    adapter = NewsAPIAdapter(api_key="bad", transport=json_transport(payload))

    result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

    assert result.success is False
    assert result.error == "NewsAPI error: Your API key is invalid."


@pytest.mark.asyncio
async def test_http_error_fails_the_source(json_transport):
    adapter = NewsAPIAdapter(api_key="k", transport=json_transport({"status": "error"}, status_code=429))

    result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

    assert result.success is False
    assert result.error == "NewsAPI returned HTTP 429"


@pytest.mark.asyncio
async def test_malformed_json_fails_the_source():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
    adapter = NewsAPIAdapter(api_key="k", transport=transport)

    result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

    assert result.success is False
    assert result.error.startswith("Malformed JSON from NewsAPI")


@pytest.mark.asyncio
async def test_missing_key_makes_no_request(json_transport):
    requests = []
    adapter = NewsAPIAdapter(api_key=None, transport=json_transport({}, requests=requests))

    assert await adapter.fetch(Category.GENERAL, "gb", 5) == []
    assert requests == []
