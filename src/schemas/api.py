"""API response schemas.

This module defines the common API response formats used across the application.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel


# Type variable for generic response types
T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper used by auxiliary endpoints (health).

    Attributes:
        success: Whether the request was successful.
        data: The actual response data (when success is True).
        message: A human-readable message about the response.
        error: Error details (when success is False).
    """

    success: bool = True
    data: T | None = None
    message: str = "Operation completed successfully"
    error: dict[str, Any] | None = None


class ErrorEnvelope(BaseModel):
    """Flat error body returned with every non-2xx response.

    Attributes:
        error: Human-readable error message.
        details: Optional diagnostic rendering of the underlying failure.
        cause: Optional rendering of the root cause of the failure.
    """

    error: str
    details: str | None = None
    cause: str | None = None

    def to_content(self) -> dict[str, str]:
        """Serialize without the absent optional fields."""
        return self.model_dump(exclude_none=True)
