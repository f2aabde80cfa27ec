"""
Correlation IDs for tracing one request or one indexing run through the logs.

The ID lives in a context variable so every log line emitted while handling
an HTTP request, or while a batch indexing run is in progress, carries it.

Usage:
    from recall.shared.correlation import CorrelationMiddleware, get_correlation_id

    # In main.py:
    app.add_middleware(CorrelationMiddleware)

    # In a background job:
    with correlation_scope("index-all"):
        ...
"""

import contextvars
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


_correlation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

# Header names for correlation ID (check multiple for compatibility)
CORRELATION_HEADERS = [
    "X-Correlation-ID",
    "X-Request-ID",
]

RESPONSE_HEADER = "X-Correlation-ID"


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID for the current context, if any."""
    return _correlation_id_ctx.get()


def generate_correlation_id(prefix: Optional[str] = None) -> str:
    """New short ID; UUID4 truncated to 8 characters."""
    short = str(uuid.uuid4())[:8]
    return f"{prefix}-{short}" if prefix else short


@contextmanager
def correlation_scope(prefix: Optional[str] = None) -> Iterator[str]:
    """
    Bind a fresh correlation ID for the duration of a block.

    An ID already bound (e.g. by the request middleware) is reused so a
    batch run triggered over HTTP keeps the request's ID.
    """
    existing = _correlation_id_ctx.get()
    if existing:
        yield existing
        return

    correlation_id = generate_correlation_id(prefix)
    token = _correlation_id_ctx.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_ctx.reset(token)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle correlation IDs for request tracing.

    For each incoming request:
    1. Checks for existing correlation ID in headers
    2. Generates a new one if not present
    3. Stores it in request.state and context variable
    4. Adds it to response headers
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        correlation_id = None
        for header in CORRELATION_HEADERS:
            correlation_id = request.headers.get(header)
            if correlation_id:
                break

        if not correlation_id:
            correlation_id = generate_correlation_id()

        request.state.correlation_id = correlation_id
        token = _correlation_id_ctx.set(correlation_id)

        try:
            response = await call_next(request)
        finally:
            _correlation_id_ctx.reset(token)

        response.headers[RESPONSE_HEADER] = correlation_id
        return response
