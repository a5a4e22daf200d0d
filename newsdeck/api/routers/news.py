"""News feed API router.

This module provides the feed endpoint the client calls for every category
tab, plus the category browser data.
"""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from newsdeck.api.dependencies import AggregationServiceDep, SettingsDep
from newsdeck.core.config import Settings
from newsdeck.core.constants import (
    SUBCATEGORY_PARENT_CATEGORY,
    SUBCATEGORY_QUERIES,
    Category,
    SourceName,
    normalize_category,
)
from newsdeck.core.exceptions import InvalidRequestError
from newsdeck.models.api.news import (
    CategoriesResponse,
    CategoryGroup,
    ErrorResponse,
    FetchNewsRequest,
    FetchNewsResponse,
    Subcategory,
)
from newsdeck.models.domain.article import AggregationRequest
from newsdeck.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Headers sent with the explicit preflight answer
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def to_aggregation_request(body: FetchNewsRequest, config: Settings) -> AggregationRequest:
    """Normalize the request body into an AggregationRequest.

    Args:
        body: Validated request body
        config: Application settings supplying defaults and bounds

    Returns:
        Normalized aggregation request

    Raises:
        InvalidRequestError: If the source selector names an unknown source
    """
    source_selector = None
    if body.source:
        try:
            source_selector = SourceName(body.source.strip().lower())
        except ValueError as e:
            known = ", ".join(s.value for s in SourceName)
            raise InvalidRequestError(f"Unknown source '{body.source}'. Expected one of: {known}") from e

    return AggregationRequest(
        category=normalize_category(body.category),
        country=body.country or config.default_country,
        page_size=min(body.page_size, config.max_page_size),
        search_query=body.search_query,
        source_selector=source_selector,
    )


@router.post(
    "/fetch-news",
    response_model=FetchNewsResponse,
    status_code=status.HTTP_200_OK,
    summary="Fetch an interleaved news page",
    description=(
        "Fetch articles for one category from every enabled provider concurrently, "
        "filter them and interleave them into a single page. Providers that fail "
        "are skipped; when all of them fail the page is empty."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body or unknown source"},
        500: {"model": ErrorResponse, "description": "Unexpected server error"},
    },
)
async def fetch_news(
    body: FetchNewsRequest,
    aggregator: AggregationServiceDep,
    config: SettingsDep,
) -> FetchNewsResponse | JSONResponse:
    """Return one page of interleaved articles.

    Args:
        body: Feed request
        aggregator: Aggregation service (injected)
        config: Application settings (injected)

    Returns:
        Articles and the number of distinct articles fetched

    Raises:
        InvalidRequestError: If the source selector is unknown (rendered as 400)
    """
    request = to_aggregation_request(body, config)

    logger.info(
        "Received fetch-news request",
        extra={
            "request_id": request.request_id,
            "category": request.category.value,
            "page_size": request.page_size,
            "source_selector": request.source_selector.value if request.source_selector else None,
        },
    )

    try:
        result = await aggregator.run(request)
    except Exception as e:
        logger.error(
            f"Unexpected error while aggregating news: {e}",
            exc_info=True,
            extra={"request_id": request.request_id},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e) or type(e).__name__).model_dump(by_alias=True),
        )

    return FetchNewsResponse(articles=result.articles, total_results=result.total_results)


@router.options(
    "/fetch-news",
    status_code=status.HTTP_200_OK,
    include_in_schema=False,
)
async def fetch_news_preflight() -> Response:
    """Answer preflight requests that reach the router with an empty body."""
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.get(
    "/categories",
    response_model=CategoriesResponse,
    status_code=status.HTTP_200_OK,
    summary="List categories and subcategories",
    description="Normalized categories plus the finance and football subcategories with their search queries.",
)
async def list_categories() -> CategoriesResponse:
    """List the categories the feed serves.

    Returns:
        Categories and subcategory groups
    """
    groups = [
        CategoryGroup(
            name=group,
            category=SUBCATEGORY_PARENT_CATEGORY[group].value,
            subcategories=[
                Subcategory(name=name, search_query=query) for name, query in subcategories.items()
            ],
        )
        for group, subcategories in SUBCATEGORY_QUERIES.items()
    ]
    return CategoriesResponse(categories=[c.value for c in Category], groups=groups)
