"""Pytest configuration and shared fixtures.

This module provides common fixtures for all tests: an article factory,
settings isolation for provider credentials, and helpers for serving canned
provider responses through ``httpx.MockTransport``.
"""

import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from newsdeck.core.config import settings
from newsdeck.core.constants import Category
from newsdeck.models.domain.article import Article

_ids = itertools.count(1)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def build_article(
    source: str = "Example News",
    title: str | None = None,
    summary: str = "A summary that is comfortably longer than twenty characters.",
    content: str | None = None,
    category: Category = Category.GENERAL,
    minutes_ago: int = 0,
    **overrides: Any,
) -> Article:
    """Build a valid article; every call gets a unique id and title."""
    number = next(_ids)
    return Article(
        id=overrides.pop("id", f"test-{number}"),
        title=title or f"Test headline number {number} for the feed",
        summary=summary,
        content=content if content is not None else "Body text. " * 20,
        source=source,
        category=category,
        published_at=BASE_TIME - timedelta(minutes=minutes_ago),
        read_time="2 min read",
        **overrides,
    )


@pytest.fixture
def make_article() -> Callable[..., Article]:
    """Article factory fixture.

    Returns:
        Callable building valid Article instances
    """
    return build_article


@pytest.fixture(autouse=True)
def no_provider_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials from the environment or a local .env out of tests."""
    monkeypatch.setattr(settings, "newsapi_key", None)
    monkeypatch.setattr(settings, "pa_media_api_keys", [])
    monkeypatch.setattr(settings, "newsdata_api_key", None)
    monkeypatch.setattr(settings, "youtube_api_key", None)
    monkeypatch.setattr(settings, "brave_search_api_key", None)


def _json_transport(
    payload: Any,
    status_code: int = 200,
    requests: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Transport answering every request with the same JSON payload.

    Args:
        payload: JSON body returned for every request
        status_code: HTTP status returned
        requests: Optional list collecting the requests made

    Returns:
        MockTransport for injection into an adapter
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for transports serving one canned JSON payload."""
    return _json_transport


@pytest.fixture
def long_text() -> str:
    """Article body long enough to pass every content threshold."""
    return (
        "Markets moved sharply on Tuesday as investors weighed fresh economic data. "
        "Analysts said the figures pointed to slower growth in the coming quarter. "
        "Several large companies reported results ahead of expectations this week. "
        "Trading volumes were higher than average across the main European exchanges. "
        "Officials are expected to comment on the outlook at a briefing next month. "
        "The central bank has kept interest rates unchanged since the start of the year."
    )
