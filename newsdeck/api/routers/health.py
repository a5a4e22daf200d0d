"""Health check API router.

Reports whether the service is up and which providers can be called.
"""

from fastapi import APIRouter, status

from newsdeck.api.dependencies import AggregationServiceDep, SettingsDep
from newsdeck.core.constants import SourceName
from newsdeck.models.api.news import HealthResponse, SourceStatus
from newsdeck.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Overall health check",
    description="Service status plus, per source, whether credentials are present and its share of the page.",
)
async def health_check(aggregator: AggregationServiceDep, config: SettingsDep) -> HealthResponse:
    """Check service health.

    The service is ``healthy`` when at least one enabled source has
    credentials and ``degraded`` otherwise; a degraded service still answers
    feed requests, with empty pages.

    Returns:
        Health status with per-source configuration
    """
    sources: dict[str, SourceStatus] = {}
    for source in SourceName:
        adapter = aggregator.adapters.get(source)
        sources[source.value] = SourceStatus(
            configured=adapter is not None and adapter.is_configured,
            target_fraction=aggregator.policy.fractions.get(source, 0.0),
        )

    usable = [
        name for name, state in sources.items() if state.configured and state.target_fraction > 0
    ]
    health_status = "healthy" if usable else "degraded"

    logger.debug(f"Health check completed: {health_status}", extra={"usable_sources": usable})

    return HealthResponse(
        status=health_status,
        version=config.api_version,
        environment=config.environment,
        sources=sources,
    )
