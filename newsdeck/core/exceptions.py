"""Custom exception hierarchy for the aggregation service.

This module defines all custom exceptions used throughout the application,
organized in a clear hierarchy for better error handling and reporting.
"""


class NewsDeckError(Exception):
    """Base exception for all aggregation service errors.

    All custom exceptions in the system should inherit from this base class
    to allow for consistent error handling at the API boundary.
    """

    pass


class NewsSourceError(NewsDeckError):
    """Errors raised inside a single source adapter.

    Never crosses the adapter boundary: the adapter catches it and reports
    an empty, failed result for its source.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class SourceConfigurationError(NewsSourceError):
    """A source adapter is missing required configuration.

    Raised when an API key or base URL needed by the provider is absent.
    """

    pass


class SourceFetchError(NewsSourceError):
    """Transient provider failure.

    Raised on network errors, non-2xx responses, provider-level error
    payloads, and malformed JSON bodies.
    """

    pass


class SourceMixPolicyError(NewsDeckError):
    """Invalid source mix policy.

    Raised when target fractions are negative, do not sum to one, or the
    interleaving rules reference unknown sources.
    """

    pass


class InvalidRequestError(NewsDeckError):
    """The incoming aggregation request cannot be served.

    Raised for unknown source selectors and out-of-range parameters; mapped
    to a 400 response by the API layer.
    """

    pass
