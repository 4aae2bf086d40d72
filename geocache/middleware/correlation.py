"""Correlation ID middleware for request tracking."""

import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from structlog.contextvars import bind_contextvars, clear_contextvars

HEADER_NAME = "X-Request-ID"


def is_valid_correlation_id(value: str | None) -> bool:
    """Accept UUIDs only, so clients cannot inject arbitrary log content."""
    if not value:
        return False
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle request correlation IDs.

    Reuses a valid incoming ``X-Request-ID`` or generates one, then exposes it
    on ``request.state``, in the structlog context and on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        clear_contextvars()

        header_value = request.headers.get(HEADER_NAME)
        correlation_id = (
            header_value if is_valid_correlation_id(header_value) else str(uuid.uuid4())
        )

        bind_contextvars(correlation_id=correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[HEADER_NAME] = correlation_id
        return response
