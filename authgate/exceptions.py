"""
Error taxonomy for authgate.

Every error carries the HTTP status it maps to. The exception handler in
main.py turns these into JSON responses.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger()


class AuthGateError(Exception):
    """Base exception for all authgate errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "detail": self.message,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigurationError(AuthGateError):
    """Missing or invalid configuration. Fatal at startup."""

    status_code = 500
    code = "configuration_error"


class UnsupportedProviderError(AuthGateError):
    """The {provider} path segment names no registered provider."""

    status_code = 404
    code = "unsupported_provider"

    def __init__(self, provider: str):
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class AuthenticationFailedError(AuthGateError):
    """
    State mismatch, code exchange failure or upstream timeout.

    Terminal for the request: the browser must restart from /auth/{provider}.
    """

    status_code = 401
    code = "authentication_failed"

    def __init__(self, message: str, reason: str = "failed", original_error: Exception | None = None):
        super().__init__(message, original_error=original_error)
        self.reason = reason


class DependencyUnhealthyError(AuthGateError):
    """A downstream dependency failed its health check."""

    status_code = 503
    code = "dependency_unhealthy"


async def authgate_error_handler(request: Request, exc: AuthGateError) -> JSONResponse:
    """Render an AuthGateError as a JSON response."""
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=exc.message,
        status_code=exc.status_code,
    )
    headers = None
    if isinstance(exc, AuthenticationFailedError):
        headers = {"Cache-Control": "no-store"}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )
