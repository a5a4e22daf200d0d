"""Service layer for the aggregation pipeline.

The aggregator lives in ``newsdeck.services.news_aggregator``; the content
scraper, relevance filter, source mix policy and interleaver it is built
from sit next to it and are used by the source adapters as well.
"""
