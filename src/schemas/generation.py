"""Request/response schemas for the generation endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Framework identifiers offered to users, value -> label. The server does not
# restrict framework to these values; any identifier is forwarded to the model.
FRAMEWORK_OPTIONS: dict[str, str] = {
    "html-css-bootstrap": "HTML + CSS + Bootstrap",
    "html-tailwind-js": "HTML + Tailwind CSS + JS",
    "html-css-js": "HTML + CSS + JS",
    "react-tailwind": "React JS + Tailwind CSS",
}

DEFAULT_FRAMEWORK_OPTION = "html-css-js"


class GenerateRequest(BaseModel):
    """Body of ``POST /api/generate``.

    ``prompt`` defaults to an empty string so that a missing prompt is reported
    as "Prompt is required" rather than a schema error. ``framework`` is left as
    None when absent; the service substitutes the configured default.
    """

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(default="", description="Natural-language component description")
    framework: str | None = Field(default=None, description="Framework identifier")

    @field_validator("prompt", mode="before")
    @classmethod
    def null_prompt_is_empty(cls, v: object) -> object:
        """An explicit null prompt is reported like a missing one."""
        return "" if v is None else v


class GenerateResponse(BaseModel):
    """Successful generation: the provider's raw text, possibly empty."""

    code: str = ""
