"""Application settings, CORS configuration and credential resolution."""

import json
import os
from collections.abc import Mapping, Sequence
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Recognized credential sources, in resolution order. The first present value
# wins; values are never merged.
API_KEY_ENV_VARS: tuple[str, ...] = (
    "GENAI_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_FRAMEWORK = "html-css"
MAX_BODY_BYTES = 1024 * 1024


def resolve_api_key(
    sources: Mapping[str, str | None],
    names: Sequence[str] = API_KEY_ENV_VARS,
) -> str | None:
    """Return the first non-empty credential found under ``names``.

    ``sources`` is any mapping (``os.environ``, a settings dump, a plain dict in
    tests), which keeps resolution independent of the HTTP layer.
    """
    for name in names:
        value = sources.get(name)
        if value and value.strip():
            return value.strip()
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env"), env_file_encoding="utf-8", extra="ignore"
    )

    # App
    APP_NAME: str = "UIGen"
    ENVIRONMENT: str = "development"  # development | production | test
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # CORS
    # Accept list or CSV/JSON string from env; normalized to list[str] by validators
    CORS_ORIGINS: list[str] | str = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    ALLOW_CREDENTIALS: bool = False

    # Provider credentials, see API_KEY_ENV_VARS for precedence
    GENAI_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = None
    GOOGLE_API_KEY: str | None = None

    GENAI_MODEL: str = DEFAULT_MODEL
    DEFAULT_FRAMEWORK: str = DEFAULT_FRAMEWORK

    # Transport limits
    MAX_BODY_BYTES: int = MAX_BODY_BYTES

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: object) -> list[str]:
        """Allow list, CSV string, or JSON array string for CORS origins."""
        if isinstance(v, list):
            return [str(i).strip() for i in v]
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    parsed = json.loads(s)
                except json.JSONDecodeError as e:
                    raise ValueError(
                        "CORS_ORIGINS must be a CSV list or JSON array string"
                    ) from e
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON must be a list")
                return [str(i).strip() for i in parsed]
            # CSV fallback
            return [i.strip() for i in s.split(",") if i.strip()]
        raise ValueError("Invalid CORS_ORIGINS type; expected str or list[str]")

    @model_validator(mode="after")
    def _validate_cors_credentials(self) -> "Settings":
        """Ensure wildcard origins are not used when credentials are allowed."""
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = self.assemble_cors_origins(self.CORS_ORIGINS)
        if self.ALLOW_CREDENTIALS and any(
            o.strip() == "*" for o in (self.CORS_ORIGINS or [])
        ):
            raise ValueError(
                "CORS configuration error: ALLOW_CREDENTIALS=True but "
                "CORS_ORIGINS contains '*'. Use explicit origins when credentials "
                "are allowed."
            )
        return self

    @property
    def api_key(self) -> str | None:
        """Credential resolved from the recognized sources, or None."""
        return resolve_api_key(
            {name: getattr(self, name) for name in API_KEY_ENV_VARS}
        )


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env not in {"development", "production", "test"}:
        raise ValueError("ENVIRONMENT must be 'development', 'production', or 'test'")

    if env == "production":
        env_file = ".env.prod"
    elif env == "development":
        env_file = ".env"
    else:
        # test environment - no env file needed, use defaults
        env_file = ""

    # The Settings initializer accepts a runtime-only `_env_file` kwarg used by
    # pydantic-settings; mypy's stub doesn't allow this call argument.
    return Settings(_env_file=env_file or None)  # type: ignore[call-arg]
