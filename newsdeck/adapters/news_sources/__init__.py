"""News source adapters."""

from newsdeck.adapters.news_sources.base import NewsSourceAdapter
from newsdeck.adapters.news_sources.brave_search import BraveSearchAdapter
from newsdeck.adapters.news_sources.newsapi import NewsAPIAdapter
from newsdeck.adapters.news_sources.newsdata import NewsDataAdapter
from newsdeck.adapters.news_sources.pa_media import PAMediaAdapter
from newsdeck.adapters.news_sources.youtube import YouTubeAdapter

__all__ = [
    "NewsSourceAdapter",
    "NewsAPIAdapter",
    "PAMediaAdapter",
    "NewsDataAdapter",
    "YouTubeAdapter",
    "BraveSearchAdapter",
]
