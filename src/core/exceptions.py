"""Domain exceptions for the generation proxy.

Each exception carries the HTTP status and the flat error envelope fields the
API layer renders (`error`, optionally `details` and `cause`), plus a stable
`error_code` for log tagging. The proxy never retries; every upstream failure
is translated into exactly one of these.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class GenerationError(Exception):
    """Base class for generation proxy errors."""

    message: str
    error_code: str
    status_code: int = 500
    details: str | None = None
    cause: str | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"

    def to_envelope(self) -> dict[str, str]:
        """Render the flat JSON error envelope, omitting absent fields."""
        envelope = {"error": self.message}
        if self.details is not None:
            envelope["details"] = self.details
        if self.cause is not None:
            envelope["cause"] = self.cause
        return envelope


class DependencyMissingError(GenerationError):
    def __init__(self, message: str = "@google/genai not installed on server") -> None:
        super().__init__(message=message, error_code="dependency_missing")


class CredentialMissingError(GenerationError):
    def __init__(
        self,
        message: str = (
            "Server missing API key. Set GENAI_API_KEY / GEMINI_API_KEY / "
            "GOOGLE_API_KEY in environment"
        ),
    ) -> None:
        super().__init__(message=message, error_code="credential_missing")


class InvalidInputError(GenerationError):
    def __init__(self, message: str = "Prompt is required") -> None:
        super().__init__(message=message, error_code="invalid_input", status_code=400)


class ProviderError(GenerationError):
    """Upstream failure (network, auth or API error) from the LLM provider."""

    def __init__(
        self,
        details: str,
        cause: str = "",
        message: str = "Generation failed on provider",
    ) -> None:
        super().__init__(
            message=message,
            error_code="provider_error",
            details=details,
            cause=cause,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> ProviderError:
        """Best-effort string rendering of a failure and its root cause."""
        root = exc.__cause__ or exc.__context__
        return cls(details=str(exc), cause=str(root) if root is not None else "")
