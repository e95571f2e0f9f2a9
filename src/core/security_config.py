"""Security configuration constants for the UIGen API.

This module centralizes:
- Sensitive keys that should be sanitized from logs
- Which optional error envelope fields each environment may expose
"""

# Keys redacted from structured log entries (substring match, case-insensitive)
SENSITIVE_KEYS: set[str] = {
    "api_key",
    "apikey",
    "genai_api_key",
    "gemini_api_key",
    "google_api_key",
    "secret",
    "token",
    "password",
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-goog-api-key",
    "credential",
}

# Optional envelope fields for unexpected (non-domain) errors. Domain errors
# always carry their own `details`/`cause` because clients rely on them for
# diagnostics.
PRODUCTION_ERROR_FIELDS: set[str] = {"error"}

DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "exception_type",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error envelope fields based on environment."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)
