"""
Per-request correlation ids.

A client may send its own id in ``X-Correlation-ID``; anything that is not
a short token of letters, digits and dashes is replaced with a generated
one so log lines stay greppable.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from library_api.constants import CORRELATION_ID_HEADER, CORRELATION_ID_LENGTH

_current_id: ContextVar[str] = ContextVar("correlation_id", default="")
_VALID_ID = re.compile(r"^[A-Za-z0-9-]+$")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:CORRELATION_ID_LENGTH]


def resolve_correlation_id(header_value: str | None) -> str:
    """
    Pick the id for a request from the incoming header value.

    Args:
        header_value: Raw ``X-Correlation-ID`` value, if any.

    Returns:
        The caller's id truncated to CORRELATION_ID_LENGTH, or a new one.
    """
    if header_value and _VALID_ID.match(header_value):
        return header_value[:CORRELATION_ID_LENGTH]
    return new_correlation_id()


class CorrelationIDMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """Binds a correlation id to the request and echoes it in the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.correlation_id = cid
        token = _current_id.set(cid)

        try:
            response = await call_next(request)
        finally:
            _current_id.reset(token)

        response.headers[CORRELATION_ID_HEADER] = cid
        return response


def get_correlation_id() -> str:
    """Correlation id of the request being served ('' outside a request)."""
    return _current_id.get()
