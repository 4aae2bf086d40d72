"""Request metrics middleware for Prometheus monitoring."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from geocache.core.events import REQUEST_DURATION, REQUESTS_TOTAL, RESPONSES_TOTAL
from geocache.core.logging import get_logger

logger = get_logger()


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect request/response metrics.

    Records:
    - Total requests by method and path
    - Total responses by status code
    - Request duration histogram
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and record metrics.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers
        """
        # Record request (ensure consistent path naming)
        path = str(request.url.path).rstrip("/") or "/"
        REQUESTS_TOTAL.labels(method=request.method, path=path).inc()

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        RESPONSES_TOTAL.labels(status_code=str(response.status_code)).inc()
        REQUEST_DURATION.labels(method=request.method, path=path).observe(duration)

        logger.info(
            "request_processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )
        return response
