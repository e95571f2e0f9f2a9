"""Middleware for request correlation ID tracking and body size limits."""

import uuid
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.error_handler import set_correlation_id, structured_logger
from schemas.api import ErrorEnvelope


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and track correlation IDs for requests.

    This middleware:
    - Reuses an incoming X-Correlation-ID header or generates a new ID
    - Sets the correlation ID in the request context
    - Adds correlation ID to response headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID")
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than ``max_bytes`` with a 413 envelope.

    The declared Content-Length is checked first; bodies sent without one are
    read (Starlette caches them for the downstream handler) and measured.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method in {"POST", "PUT", "PATCH"}:
            declared = request.headers.get("content-length")
            if declared is not None:
                try:
                    too_large = int(declared) > self.max_bytes
                except ValueError:
                    return self._reject(400, "Invalid Content-Length header")
            else:
                too_large = len(await request.body()) > self.max_bytes
            if too_large:
                structured_logger.warning(
                    "Request body too large",
                    path=request.url.path,
                    limit=self.max_bytes,
                )
                return self._reject(413, "Request body too large")
        return await call_next(request)

    @staticmethod
    def _reject(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=status_code, content=ErrorEnvelope(error=message).to_content()
        )
