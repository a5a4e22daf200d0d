"""Request and response schemas for the news endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from newsdeck.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from newsdeck.models.domain.article import Article


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FetchNewsRequest(CamelModel):
    """Body of ``POST /fetch-news``.

    ``category`` and ``country`` fall back to the configured defaults when
    omitted; ``source`` restricts the call to a single provider.
    """

    category: str = "general"
    country: str | None = Field(default=None, min_length=2, max_length=2)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    search_query: str | None = Field(default=None, max_length=500)
    source: str | None = None


class FetchNewsResponse(CamelModel):
    """Successful aggregation response."""

    articles: list[Article]
    total_results: int


class ErrorResponse(CamelModel):
    """Error envelope; keeps the article fields so clients parse one shape."""

    error: str
    articles: list[Article] = Field(default_factory=list)
    total_results: int = 0


class Subcategory(CamelModel):
    name: str
    search_query: str


class CategoryGroup(CamelModel):
    """A top-level feed tab and the subcategories it offers."""

    name: str
    category: str
    subcategories: list[Subcategory] = Field(default_factory=list)


class CategoriesResponse(CamelModel):
    categories: list[str]
    groups: list[CategoryGroup]


class SourceStatus(CamelModel):
    configured: bool
    target_fraction: float


class HealthResponse(CamelModel):
    status: str
    version: str
    environment: str
    sources: dict[str, SourceStatus]
