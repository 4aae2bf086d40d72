"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from geocache.core.config import settings
from geocache.core.events import SEARCH_ERRORS_TOTAL
from geocache.core.exceptions import SearchError
from geocache.core.logging import get_logger

logger = get_logger()


def _correlation_id(request: Request) -> str | None:
    correlation_id = getattr(request.state, "correlation_id", None)
    return str(correlation_id) if correlation_id is not None else None


def error_response(
    request: Request,
    error: str,
    message: str,
    status_code: int,
    detail: str | None = None,
) -> JSONResponse:
    """
    Log an error and build the uniform JSON error payload.

    Args:
    ----
        request: The request that failed
        error: Stable error kind
        message: Client-facing message
        status_code: HTTP status code
        detail: Raw diagnostic text, only sent when ``EXPOSE_ERROR_DETAILS``

    Returns:
    -------
        A JSON response with error details
    """
    correlation_id = _correlation_id(request)
    SEARCH_ERRORS_TOTAL.labels(kind=error).inc()
    logger.error(
        "request_error",
        error_type=error,
        error_message=message,
        error_detail=detail,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
        correlation_id=correlation_id,
    )

    content: dict[str, str | int] = {
        "error": error,
        "message": message,
        "status_code": status_code,
        "correlation_id": correlation_id if correlation_id else "unknown",
    }
    if detail and settings.EXPOSE_ERROR_DETAILS:
        content["detail"] = detail

    response = JSONResponse(status_code=status_code, content=content)
    if correlation_id:
        response.headers["X-Request-ID"] = correlation_id
    return response


async def handle_search_error(request: Request, exc: SearchError) -> JSONResponse:
    """Render a ``SearchError`` with its stable kind and status code."""
    return error_response(
        request, exc.error_kind, exc.message, exc.status_code, exc.detail
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render query/path parameter validation failures as input errors."""
    fields = ", ".join(
        ".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()
    )
    return error_response(
        request,
        "InputError",
        f"Invalid request parameters: {fields}" if fields else "Invalid request",
        HTTP_422_UNPROCESSABLE_ENTITY,
        str(exc.errors()),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing and HTTP errors (404, 405 ...) in the same shape."""
    return error_response(request, "HTTPException", str(exc.detail), exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(SearchError, handle_search_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn unexpected exceptions into a 500 JSON payload.

    Known errors are rendered by the handlers installed with
    ``register_exception_handlers`` before they reach this middleware.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except SearchError as exc:
            return await handle_search_error(request, exc)
        except Exception as exc:
            logger.exception("unhandled_exception", path=request.url.path)
            return error_response(
                request,
                "InternalServerError",
                "Internal server error",
                HTTP_500_INTERNAL_SERVER_ERROR,
                f"{exc.__class__.__name__}: {exc}",
            )
