"""
Custom exception classes for the application.

Every exception carries the HTTP status code it maps to, so route handlers
can translate any AppException into a response in one place
(see library_api.utils.error_handler).
"""

from typing import Any

from starlette.authentication import (
    AuthenticationError as StarletteAuthenticationError,
)


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for REST API responses.
    """

    http_status: int = 500

    def __init__(self, message: str):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)

    @property
    def detail(self) -> Any:
        """Body placed under "detail" in the HTTP error response."""
        return self.message


class ValidationError(AppException):
    """
    Data validation failed.

    Raised when an inbound payload is malformed JSON or violates field
    constraints. Carries the list of violations, one per offending field.

    HTTP Status: 400 Bad Request
    """

    http_status = 400

    def __init__(
        self,
        message: str,
        violations: list[dict[str, str]] | None = None,
    ):
        super().__init__(message)
        self.violations = violations or []

    @property
    def detail(self) -> Any:
        return self.violations or [{"field": "", "message": self.message}]


class AuthenticationError(AppException, StarletteAuthenticationError):
    """
    Authentication failed.

    Raised when a supplied credential (bearer token, basic credentials) is
    invalid or expired. Also a Starlette AuthenticationError, so raising it
    from the authentication backend routes it to the middleware's on_error
    handler.

    HTTP Status: 401 Unauthorized
    """

    http_status = 401

    def __init__(self, reason: str, message: str):
        """
        Args:
            reason: A machine-readable error code (e.g. 'token_expired').
            message: Human-readable error details.
        """
        self.reason = reason
        super().__init__(message)


class AuthorizationError(AppException):
    """
    Authorization failed.

    Raised when a caller lacks the role required for an operation.

    HTTP Status: 403 Forbidden
    """

    http_status = 403


class NotFoundError(AppException):
    """
    Resource not found.

    Raised when the id in a request path does not match any record.

    HTTP Status: 404 Not Found
    """

    http_status = 404


class DatabaseError(AppException):
    """
    Database operation failed.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500


class CacheError(AppException):
    """
    Cache backend operation failed and cannot be recovered.

    Raised when cached responses can no longer be guaranteed coherent,
    e.g. a tag invalidation that did not reach the backend.

    HTTP Status: 503 Service Unavailable
    """

    http_status = 503
