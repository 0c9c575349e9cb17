"""
Error handling for HTTP endpoints.

handle_http_errors converts AppException instances raised inside a route
handler into HTTPException responses with the exception's status code, so
handlers need no try/except blocks of their own. Query and path parameter
errors detected by FastAPI are answered with 400 and the same violation
shape as body validation errors.
"""

from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from library_api.exceptions import (
    AppException,
    AuthenticationError,
    DatabaseError,
)
from library_api.logging import logger


def to_http_exception(ex: AppException) -> HTTPException:
    return HTTPException(status_code=ex.http_status, detail=ex.detail)


def handle_http_errors(func: Callable) -> Callable:
    """
    Decorator for HTTP endpoints to convert AppException to HTTPException.

    Args:
        func: The HTTP endpoint function to wrap.

    Returns:
        Wrapped function that handles exceptions.

    Example:
        ```python
        @router.get("/api/books/{id}")
        @handle_http_errors
        async def get_book(id: int, repo: BookRepoDep) -> Response:
            book = await GetBookCommand(repo).execute(id)  # may raise NotFoundError
            ...
        ```
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except AppException as ex:
            logger.warning(
                f"AppException in {func.__name__}: {ex.message}",
                extra={"exception_type": type(ex).__name__},
            )
            raise to_http_exception(ex)
        except SQLAlchemyError as ex:
            logger.error(
                f"Database error in {func.__name__}: {ex}",
                exc_info=True,
            )
            raise to_http_exception(DatabaseError("Database error occurred"))

    return wrapper


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer invalid query/path parameters with 400 and a violation list."""
    violations = [
        {
            "field": str(error["loc"][-1]) if error["loc"] else "",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.info(
        f"Rejected {request.method} {request.url.path}: {violations}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": violations},
    )


async def app_exception_handler(
    request: Request, exc: AppException
) -> JSONResponse:
    """
    Answer an AppException raised outside a wrapped handler (for example by
    the role gate dependency) with its status code.
    """
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if isinstance(exc, AuthenticationError)
        else None
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.detail},
        headers=headers,
    )
