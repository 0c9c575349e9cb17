"""
Middleware for injecting contextual fields into structured logs.

This middleware adds request-specific information to the log context
that will be included in all log messages during request processing.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from library_api.logging import clear_log_context, logger, set_log_context


class LoggingContextMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """
    Middleware to inject contextual fields into structured logs.

    This middleware:
    - Adds endpoint and method to log context
    - Adds username if the caller is authenticated
    - Logs the response status code
    - Clears log context after request completes
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        set_log_context(
            endpoint=request.url.path,
            method=request.method,
        )

        user = request.scope.get("user")
        username = getattr(user, "username", None)
        if username:
            set_log_context(username=username)

        try:
            response = await call_next(request)
            set_log_context(status_code=response.status_code)
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}"
            )
            return response
        finally:
            clear_log_context()
