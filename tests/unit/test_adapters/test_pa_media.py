"""Unit tests for the PA Media adapter."""

import httpx
import pytest

from newsdeck.adapters.news_sources.pa_media import PAMediaAdapter, pick_rendition
from newsdeck.core.constants import Category


def pa_item(number, long_text, **overrides):
    item = {
        "uri": f"urn:pa:{number}",
        "headline": f"PA Media story number {number} headline",
        "description_text": "A short standfirst supplied with the story.",
        "body_text": f"<p>{long_text}</p>",
        "versioncreated": f"2024-05-01T0{number}:00:00Z",
    }
    item.update(overrides)
    return item


@pytest.mark.asyncio
async def test_items_are_normalized(json_transport, long_text):
    payload = {"item": [pa_item(1, long_text), pa_item(2, long_text)]}
    adapter = PAMediaAdapter(api_keys=["key-1"], transport=json_transport(payload))

    articles = await adapter.fetch(Category.SPORTS, "gb", 5)

    assert [a.title for a in articles] == [
        "PA Media story number 2 headline",
        "PA Media story number 1 headline",
    ]
    assert all(a.source == "PA Media" for a in articles)
    assert articles[0].content == long_text
    assert articles[0].category == Category.SPORTS


@pytest.mark.asyncio
@pytest.mark.parametrize("container", ["item", "items", "data", "articles"])
async def test_container_keys(json_transport, long_text, container):
    adapter = PAMediaAdapter(api_keys=["k"], transport=json_transport({container: [pa_item(1, long_text)]}))

    assert len(await adapter.fetch(Category.GENERAL, "gb", 5)) == 1


@pytest.mark.asyncio
async def test_category_and_keyword_params(json_transport):
    requests = []
    adapter = PAMediaAdapter(api_keys=["k"], transport=json_transport({"item": []}, requests=requests))

    await adapter.fetch(Category.BUSINESS, "gb", 5)
    await adapter.fetch(Category.POLITICS, "gb", 5)
    await adapter.fetch(Category.GENERAL, "gb", 5)

    business, politics, general = (r.url.params for r in requests)
    assert business["category"] == "finance"
    assert business["format"] == "json"
    assert business["size"] == "10"
    assert politics["q"] == "politics government election"
    assert "category" not in politics
    assert "category" not in general and "q" not in general


@pytest.mark.asyncio
async def test_second_key_is_tried_after_failure(long_text):
    keys_seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.params["apikey"]
        keys_seen.append(key)
        if key == "expired":
            return httpx.Response(403, json={"error": "forbidden"})
        return httpx.Response(200, json={"item": [pa_item(1, long_text)]})

    adapter = PAMediaAdapter(api_keys=["expired", "valid"], transport=httpx.MockTransport(handler))

    articles = await adapter.fetch(Category.GENERAL, "gb", 5)

    assert keys_seen == ["expired", "valid"]
    assert len(articles) == 1


@pytest.mark.asyncio
async def test_all_keys_failing_fails_the_source(json_transport):
    adapter = PAMediaAdapter(api_keys=["a", "b"], transport=json_transport({}, status_code=500))

    result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

    assert result.success is False
    assert result.error.startswith("All 2 PA Media API keys failed")


@pytest.mark.asyncio
async def test_no_keys_is_a_configuration_failure():
    adapter = PAMediaAdapter(api_keys=[])

    result = await adapter.fetch_result(Category.GENERAL, "gb", 5)

    assert adapter.is_configured is False
    assert "not configured" in result.error


class TestImages:
    """Test rendition selection."""

    def test_pick_rendition_prefers_wide(self):
        renditions = [{"width": 300, "href": "a"}, {"width": 600, "href": "b"}, {"width": 1200, "href": "c"}]

        assert pick_rendition(renditions, (800, 400))["href"] == "c"
        assert pick_rendition(renditions[:2], (800, 400))["href"] == "b"
        assert pick_rendition(renditions[:1], (800, 400))["href"] == "a"
        assert pick_rendition([], (800,)) is None

    def test_feature_image_then_direct_renditions(self, long_text):
        adapter = PAMediaAdapter(api_keys=["k"])
        featured = pa_item(
            1,
            long_text,
            associations={
                "featureimage": {
                    "renditions": {
                        "thumb": {"width": 200, "href": "https://images.pa.com/thumb.jpg"},
                        "large": {"width": 1024, "href": "https://images.pa.com/large.jpg"},
                    }
                }
            },
        )
        direct = pa_item(2, long_text, renditions=[{"width": 500, "url": "https://images.pa.com/direct.jpg"}])
        bare = pa_item(3, long_text)

        images = [adapter.normalize_item(item, Category.GENERAL, i).image for i, item in enumerate((featured, direct, bare))]

        assert images == [
            "https://images.pa.com/large.jpg",
            "https://images.pa.com/direct.jpg",
            None,
        ]
