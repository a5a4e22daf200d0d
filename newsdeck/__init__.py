"""NewsDeck Aggregation Service.

Fetches news and video items from several providers in parallel, normalizes
them into one article model and interleaves them into a single card feed.
"""

__version__ = "1.0.0"
