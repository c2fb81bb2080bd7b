"""
Logging middleware for request/response logging.

Logs all HTTP requests with timing and context. Query strings are never
logged: OAuth callbacks carry the authorization code there.
"""
import time
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from authgate.routes.metrics import track_request

logger = structlog.get_logger()


def route_template(request: Request) -> str:
    """Matched route path (e.g. /auth/{provider}) to keep metric labels bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing and context.

    Adds: route, method, duration_ms, status to every log.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        # Bind context to logger for this request
        request_logger = logger.bind(
            route=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            request_logger.error(
                "request_failed",
                status_code=500,
                duration_ms=round(duration * 1000, 2),
                error=str(e)
            )
            track_request(request.method, route_template(request), 500, duration)
            raise

        duration = time.perf_counter() - start_time

        request_logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )
        track_request(request.method, route_template(request), response.status_code, duration)

        return response
