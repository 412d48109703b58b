"""Per-request context shared by the middleware and route dependencies."""

from __future__ import annotations

from uuid import uuid4

from starlette.requests import HTTPConnection

CORRELATION_HEADER = "X-Correlation-Id"


def request_correlation_id(connection: HTTPConnection) -> str:
    existing = getattr(connection.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = connection.headers.get(CORRELATION_HEADER)
    if not correlation_id:
        correlation_id = f"req-{uuid4()}"
    connection.state.correlation_id = correlation_id
    return correlation_id
