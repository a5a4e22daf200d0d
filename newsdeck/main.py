"""Main FastAPI application entry point.

This module initializes the FastAPI application with all routers, middleware,
exception handlers and lifecycle events for the NewsDeck aggregation service.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from newsdeck.api.cors import EmptyPreflightCORSMiddleware
from newsdeck.api.routers import health, news
from newsdeck.core.config import settings
from newsdeck.core.constants import SourceName
from newsdeck.core.exceptions import InvalidRequestError, NewsDeckError
from newsdeck.models.api.news import ErrorResponse
from newsdeck.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _configured_sources() -> list[str]:
    keys = {
        SourceName.NEWSAPI: settings.newsapi_key,
        SourceName.PA_MEDIA: settings.pa_media_api_keys,
        SourceName.NEWSDATA: settings.newsdata_api_key,
        SourceName.YOUTUBE: settings.youtube_api_key,
        SourceName.BRAVE: settings.brave_search_api_key,
    }
    return [source.value for source, key in keys.items() if key]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle events.

    Configures logging and reports which providers have credentials. Missing
    credentials are not fatal: those sources return empty results.

    Args:
        app: FastAPI application instance
    """
    # Startup
    setup_logging()
    logger.info("=" * 80)
    logger.info("Starting NewsDeck Aggregation Service")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Source mix: {settings.source_mix}")

    configured = _configured_sources()
    if configured:
        logger.info(f"Configured sources: {', '.join(configured)}")
    else:
        logger.warning("No provider API keys configured - every feed request will return an empty page")
    logger.info("=" * 80)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down NewsDeck Aggregation Service")
    logger.info("Application shutdown complete")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(by_alias=True),
    )


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description=(
        "NewsDeck Aggregation Service - fetches news from several providers "
        "concurrently, filters out low-quality and off-topic items, and "
        "interleaves the results into a single mixed feed page."
    ),
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Configure CORS middleware
app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.api_cors_origins,
    allow_credentials=False,
    allow_methods=settings.api_cors_allow_methods,
    allow_headers=settings.api_cors_allow_headers,
)

# Add GZip compression middleware
app.add_middleware(
    GZipMiddleware,
    minimum_size=1000,  # Only compress responses larger than 1KB
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body validation failures as the 400 error envelope."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'body')}: {error.get('msg')}"
        for error in exc.errors()
    )
    logger.warning(f"Invalid request to {request.url.path}: {details}")
    return _error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request: {details}")


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc}")
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(NewsDeckError)
async def newsdeck_error_handler(request: Request, exc: NewsDeckError) -> JSONResponse:
    logger.error(f"Request to {request.url.path} failed: {exc}", exc_info=exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


# Feed endpoints are served at the root (existing clients) and under /api/v1
for prefix in ("", "/api/v1"):
    app.include_router(news.router, prefix=prefix, tags=["news"])
    app.include_router(health.router, prefix=prefix, tags=["health"])


@app.get("/")
async def root():
    """Root endpoint providing API information.

    Returns:
        Basic API information and links to documentation
    """
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "status": "operational",
        "endpoints": ["/fetch-news", "/categories", "/health"],
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsdeck.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info",
    )
