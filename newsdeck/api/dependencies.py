"""Dependency injection for FastAPI routes.

This module provides dependency injection functions for the aggregation
service, enabling clean separation of concerns and easy testing through
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from newsdeck.core.config import Settings, settings
from newsdeck.services.news_aggregator import NewsAggregationService


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Global settings instance
    """
    return settings


def get_aggregation_service(
    config: Annotated[Settings, Depends(get_settings)],
) -> NewsAggregationService:
    """Get news aggregation service instance.

    Args:
        config: Application settings

    Returns:
        Aggregation service with one adapter per configured source
    """
    return NewsAggregationService.from_settings(config)


# Type aliases for dependency injection in route handlers
SettingsDep = Annotated[Settings, Depends(get_settings)]
AggregationServiceDep = Annotated[NewsAggregationService, Depends(get_aggregation_service)]
