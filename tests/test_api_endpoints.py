"""API endpoint tests.

The aggregation service is replaced through ``app.dependency_overrides`` with
one backed by in-memory adapters, so no request leaves the process.

Run with: pytest tests/test_api_endpoints.py -v
"""

import pytest
from fastapi.testclient import TestClient

from newsdeck.api.dependencies import get_aggregation_service
from newsdeck.core.constants import Category, SourceName
from newsdeck.main import app
from newsdeck.models.domain.article import SourceResult
from newsdeck.services.news_aggregator import NewsAggregationService

# Create test client
client = TestClient(app)


class StaticAdapter:
    """Adapter returning the same articles for every call."""

    def __init__(self, source, articles, configured=True):
        self.source = source
        self.articles = articles
        self.is_configured = configured
        self.calls = 0

    async def fetch_result(self, category, country, target_count, search_query=None):
        self.calls += 1
        return SourceResult(source=self.source, articles=self.articles[:target_count])


class FailingAdapter:
    def __init__(self, source):
        self.source = source
        self.is_configured = True

    async def fetch_result(self, category, country, target_count, search_query=None):
        return SourceResult.failed(self.source, "NewsAPI returned HTTP 500")


class ExplodingService:
    """Service whose run fails outside the adapter isolation."""

    adapters: dict = {}

    async def run(self, request):
        raise RuntimeError("interleaver blew up")


@pytest.fixture
def adapters(make_article):
    return {
        source: StaticAdapter(
            source,
            [make_article(source=source.value, category=Category.BUSINESS) for _ in range(5)],
        )
        for source in SourceName
    }


@pytest.fixture
def use_service():
    """Install a service override for the duration of one test."""

    def install(service):
        app.dependency_overrides[get_aggregation_service] = lambda: service
        return service

    yield install
    app.dependency_overrides.clear()


class TestRootEndpoint:
    def test_root_endpoint(self):
        """Root endpoint returns API information."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "NewsDeck Aggregation Service"
        assert data["status"] == "operational"
        assert "/fetch-news" in data["endpoints"]
        assert data["docs"] == "/docs"


class TestFetchNews:
    """Test the feed endpoint."""

    def test_returns_interleaved_page(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/fetch-news", json={"category": "business", "pageSize": 10})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"articles", "totalResults"}
        assert len(data["articles"]) == 10
        assert [a["source"] for a in data["articles"]][:3] == ["newsapi", "newsapi", "newsdata"]
        assert data["totalResults"] > 0

    def test_articles_use_camel_case_keys(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        article = client.post("/fetch-news", json={"category": "business", "pageSize": 3}).json()["articles"][0]

        for key in ("publishedAt", "readTime", "isVideo", "videoId", "embedUrl", "videoThumbnail"):
            assert key in article
        assert "published_at" not in article
        assert article["category"] == "business"

    def test_versioned_prefix_serves_the_same_endpoint(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/api/v1/fetch-news", json={"category": "business", "pageSize": 5})

        assert response.status_code == 200
        assert len(response.json()["articles"]) == 5

    def test_empty_body_uses_defaults(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/fetch-news", json={})

        assert response.status_code == 200
        call_counts = [adapter.calls for adapter in adapters.values()]
        assert all(count == 1 for count in call_counts)

    def test_source_selector_limits_the_call(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/fetch-news", json={"category": "business", "pageSize": 4, "source": "YouTube"})

        assert response.status_code == 200
        assert {a["source"] for a in response.json()["articles"]} == {"youtube"}
        assert adapters[SourceName.NEWSAPI].calls == 0

    def test_unknown_source_is_rejected(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/fetch-news", json={"source": "bloomberg"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"].startswith("Unknown source 'bloomberg'")
        assert data["articles"] == []
        assert data["totalResults"] == 0

    @pytest.mark.parametrize(
        "body",
        [
            {"pageSize": 500},
            {"pageSize": 0},
            {"pageSize": "many"},
            {"country": "GBR"},
        ],
    )
    def test_invalid_body_is_rejected(self, body, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post("/fetch-news", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["error"].startswith("Invalid request:")
        assert data["articles"] == []
        assert data["totalResults"] == 0

    def test_all_sources_failing_yields_empty_page(self, use_service):
        use_service(NewsAggregationService({source: FailingAdapter(source) for source in SourceName}))

        response = client.post("/fetch-news", json={"category": "general"})

        assert response.status_code == 200
        assert response.json() == {"articles": [], "totalResults": 0}

    def test_unexpected_error_returns_error_envelope(self, use_service):
        use_service(ExplodingService())

        response = client.post("/fetch-news", json={"category": "general"})

        assert response.status_code == 500
        assert response.json() == {"error": "interleaver blew up", "articles": [], "totalResults": 0}


class TestPreflight:
    def test_plain_options_has_empty_body(self):
        response = client.options("/fetch-news")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_cors_preflight_has_empty_body(self):
        response = client.options(
            "/fetch-news",
            headers={
                "Origin": "https://feed.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"

    def test_simple_request_carries_cors_header(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.post(
            "/fetch-news",
            json={"category": "business"},
            headers={"Origin": "https://feed.example.com"},
        )

        assert response.headers["access-control-allow-origin"] == "*"


class TestCategories:
    def test_lists_categories_and_subcategories(self):
        response = client.get("/categories")

        assert response.status_code == 200
        data = response.json()
        assert "general" in data["categories"]
        assert "politics" in data["categories"]
        groups = {group["name"]: group for group in data["groups"]}
        assert groups["finance"]["category"] == "business"
        assert groups["football"]["category"] == "sports"
        assert all(sub["searchQuery"] for sub in groups["finance"]["subcategories"])


class TestHealth:
    def test_healthy_with_configured_sources(self, adapters, use_service):
        use_service(NewsAggregationService(adapters))

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["sources"]["newsapi"] == {"configured": True, "targetFraction": 0.30}
        assert set(data["sources"]) == {source.value for source in SourceName}

    def test_degraded_without_credentials(self, use_service):
        use_service(
            NewsAggregationService(
                {source: StaticAdapter(source, [], configured=False) for source in SourceName}
            )
        )

        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
