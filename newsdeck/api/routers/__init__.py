"""API routers package.

This package contains all FastAPI routers for the application.
"""

from newsdeck.api.routers import health, news

__all__ = [
    "news",
    "health",
]
