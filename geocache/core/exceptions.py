"""Errors that terminate a geocache search request."""

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)


class SearchError(Exception):
    """Base class for request-fatal search errors.

    ``error_kind`` is the stable identifier sent to clients in the ``error``
    field; ``detail`` carries raw diagnostic text that is only exposed when
    ``EXPOSE_ERROR_DETAILS`` is enabled.
    """

    error_kind = "SearchError"
    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Search failed"

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class InputError(SearchError):
    """Request body absent, unparsable, not an object, or invalid."""

    error_kind = "InputError"
    status_code = HTTP_400_BAD_REQUEST
    default_message = "No valid input received."


class StoreConnectionError(SearchError):
    """Store unreachable, credentials rejected, or connect timed out."""

    error_kind = "ConnectionError"
    status_code = HTTP_503_SERVICE_UNAVAILABLE
    default_message = "DB connection failed"


class QueryExecutionError(SearchError):
    """Store rejected the search statement."""

    error_kind = "QueryExecutionError"
    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Geocache query failed"
