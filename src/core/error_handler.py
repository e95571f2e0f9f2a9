"""Centralized error handling and logging for the UIGen API.

This module provides:
- Exception handlers rendering every failure as the flat error envelope
- Structured logging with correlation IDs
- Environment-aware diagnostics (generic in production, detailed in dev)
- Redaction of credentials from log entries
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from core.config import get_settings
from core.exceptions import GenerationError
from core.security_config import get_allowed_error_fields, is_sensitive_key
from schemas.api import ErrorEnvelope


# Context variable for correlation ID tracking across async calls
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

logger = logging.getLogger(__name__)


def get_correlation_id() -> str:
    """Get or create a correlation ID for request tracing."""
    correlation_id: str | None = _correlation_id_var.get()
    if correlation_id is None or correlation_id == "":
        new_id = str(uuid.uuid4())
        _correlation_id_var.set(new_id)
        return new_id
    return correlation_id


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


class StructuredLogger:
    """Structured logger that includes correlation IDs and sanitized data."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    def _log_with_context(
        self,
        level: int,
        message: str,
        extra_data: dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        """Log with correlation ID and structured data."""
        correlation_id = get_correlation_id()
        sanitized_data = self._sanitize_data(extra_data or {})

        log_data = {
            "correlation_id": correlation_id,
            "message": message,
            **sanitized_data,
        }

        settings = get_settings()
        if settings.ENVIRONMENT == "production":
            # The JSON formatter merges `structured_data` into the record, so the
            # message itself stays plain.
            self.logger.log(
                level,
                message,
                extra={"structured_data": log_data},
                exc_info=exc_info,
            )
        else:
            self.logger.log(
                level,
                f"[{correlation_id}] {message}",
                extra={"structured_data": log_data},
                exc_info=exc_info,
            )

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Remove or mask sensitive data from log entries."""
        if not isinstance(data, dict) or not data:
            return {}

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if is_sensitive_key(key):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = self._sanitize_value(value)
        return sanitized

    def _sanitize_value(self, value: Any) -> Any:
        """Sanitize a single value which may be a dict, list, or primitive."""
        if isinstance(value, dict):
            return self._sanitize_data(value)
        if isinstance(value, list):
            return [self._sanitize_value(item) for item in value]
        return value

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info level message."""
        self._log_with_context(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning level message."""
        self._log_with_context(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error level message."""
        self._log_with_context(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log_with_context(logging.ERROR, message, kwargs, exc_info=True)


# Global structured logger instance
structured_logger = StructuredLogger(__name__)


class ExceptionNormalizationMiddleware(BaseHTTPMiddleware):
    """Catch any uncaught Exception and delegate to global_exception_handler."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return await global_exception_handler(request, exc)


def _build_error_response(
    *,
    message: str,
    environment: str,
    details: str | None = None,
    exception_type: str | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Construct a flat error envelope respecting environment rules."""
    allowed_fields = get_allowed_error_fields(environment)

    envelope = ErrorEnvelope(error=message)
    if "details" in allowed_fields and details:
        envelope.details = details
    content = envelope.to_content()
    if "exception_type" in allowed_fields and exception_type:
        content["exception_type"] = exception_type

    return JSONResponse(status_code=status_code, content=content)


async def generation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a GenerationError as its flat envelope and status code."""
    if not isinstance(exc, GenerationError):  # pragma: no cover - registration guard
        return await global_exception_handler(request, exc)

    if exc.status_code >= 500:
        structured_logger.error(
            "Generation request failed",
            error_code=exc.error_code,
            status_code=exc.status_code,
            details=exc.details,
            cause=exc.cause,
        )
    else:
        structured_logger.warning(
            "Generation request rejected",
            error_code=exc.error_code,
            status_code=exc.status_code,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler providing flat, sanitized responses.

    - Domain errors keep their own status and envelope
    - HTTP errors keep their status code
    - Validation errors map to 422
    - Anything else is a generic 500 with diagnostics only outside production
    """
    settings = get_settings()
    environment = settings.ENVIRONMENT

    if isinstance(exc, GenerationError):
        return await generation_error_handler(request, exc)

    if isinstance(exc, StarletteHTTPException):
        detail = getattr(exc, "detail", None) or "An HTTP error occurred"
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorEnvelope(error=str(detail)).to_content(),
            headers=getattr(exc, "headers", None),
        )

    if isinstance(exc, ValidationError | RequestValidationError):
        errors = exc.errors()
        structured_logger.warning("Validation error", validation_errors=errors)
        return _build_error_response(
            message="Invalid request data provided",
            environment=environment,
            details=json.dumps(errors, default=str),
            status_code=422,
        )

    structured_logger.exception(
        "Unhandled exception", exception_type=exc.__class__.__name__, error=str(exc)
    )
    return _build_error_response(
        message="An internal error occurred",
        environment=environment,
        details=str(exc),
        exception_type=exc.__class__.__name__,
    )


def setup_logging() -> None:
    """Configure application logging with proper JSON structure and idempotent setup."""
    settings = get_settings()

    log_level = logging.DEBUG if settings.ENVIRONMENT == "development" else logging.INFO
    root_logger = logging.getLogger()

    # Make setup idempotent - avoid duplicate handlers
    if root_logger.handlers:
        return

    formatter: logging.Formatter
    if settings.ENVIRONMENT == "production":
        from pythonjsonlogger.jsonlogger import JsonFormatter  # type: ignore

        formatter = JsonFormatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers in production
    if settings.ENVIRONMENT == "production":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
