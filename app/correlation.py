# app/correlation.py
"""
Correlation ID middleware for request tracing.

Provides:
- X-Request-Id header handling (accepts client-provided or generates UUID4)
- Request state storage for downstream access
- A logging filter that stamps records with the current request id
"""
from __future__ import annotations

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


MAX_REQUEST_ID_LENGTH = 64
# Alphanumeric, hyphens and underscores only (safe for logging)
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return a client-provided request ID if it is safe to echo, else None."""
    if not request_id:
        return None
    if len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    if not SAFE_REQUEST_ID_PATTERN.match(request_id):
        return None
    return request_id


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id(request: Request) -> Optional[str]:
    """Get request ID from request state (if set by middleware)."""
    return getattr(request.state, "request_id", None)


def current_request_id() -> Optional[str]:
    """Request ID of the request being handled in this context, if any."""
    return _current_request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Adds record.request_id ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _current_request_id.get() or "-"
        return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Handles X-Request-Id for request correlation.

    - Reads X-Request-Id from the incoming request (validated)
    - Generates a UUID4 if missing or invalid
    - Stores it in request.state.request_id and the logging context
    - Echoes it on every response
    """

    async def dispatch(self, request: Request, call_next):
        client_request_id = request.headers.get("x-request-id")
        request_id = validate_request_id(client_request_id) or generate_request_id()

        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        response.headers["X-Request-Id"] = request_id
        return response


def get_client_ip(request: Request) -> str:
    """
    Client IP for audit fields, respecting X-Forwarded-For.

    Only the first address in the chain is used.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
