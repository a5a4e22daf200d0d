"""Core functionality for the aggregation service."""

from newsdeck.core.config import settings
from newsdeck.core.exceptions import (
    InvalidRequestError,
    NewsDeckError,
    NewsSourceError,
    SourceConfigurationError,
    SourceFetchError,
    SourceMixPolicyError,
)

__all__ = [
    "settings",
    "NewsDeckError",
    "NewsSourceError",
    "SourceConfigurationError",
    "SourceFetchError",
    "SourceMixPolicyError",
    "InvalidRequestError",
]
