"""LLM provider adapter with capability-checked loading.

The Google GenAI SDK is imported once at process start. When it is missing the
server still starts; only generation is degraded. Callers branch on the
capability type rather than on a scattered "loaded" flag:

    capability = get_provider_capability()
    if isinstance(capability, Unavailable):
        ...
    adapter = capability.create_adapter(api_key, model)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from core.exceptions import ProviderError
from services.prompts import build_component_prompt


logger = logging.getLogger(__name__)


class ProviderAdapter(Protocol):
    """Single text-generation capability exposed by a provider."""

    async def generate(self, prompt: str, framework: str) -> str:
        """Return the provider's raw text for the component description."""
        ...


class GeminiAdapter:
    """Adapter over a ``google.genai.Client`` using the Gemini Developer API."""

    def __init__(self, client: Any, model: str) -> None:
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str, framework: str) -> str:
        contents = build_component_prompt(prompt, framework)
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
            )
        except Exception as exc:
            logger.error("Provider call failed: %s", exc, exc_info=True)
            raise ProviderError.from_exception(exc) from exc

        # `text` is None when the candidate carries no text parts
        text = getattr(response, "text", None)
        return text or ""


@dataclass(frozen=True, slots=True)
class Available:
    """The provider SDK loaded; adapters can be built from a credential."""

    client_factory: Callable[[str], Any]

    def create_adapter(self, api_key: str, model: str) -> ProviderAdapter:
        return GeminiAdapter(self.client_factory(api_key), model)


@dataclass(frozen=True, slots=True)
class Unavailable:
    """The provider SDK could not be imported."""

    reason: str


ProviderCapability = Available | Unavailable


def load_provider_capability() -> ProviderCapability:
    """Import the provider SDK and report whether generation is possible."""
    try:
        from google import genai
    except ImportError as exc:
        logger.warning(
            "Optional server dependency google-genai not installed. "
            "Install it to enable generation. (%s)",
            exc,
        )
        return Unavailable(reason=str(exc))

    def _client_factory(api_key: str) -> Any:
        # Explicitly use the Gemini Developer API (not Vertex AI)
        return genai.Client(vertexai=False, api_key=api_key)

    return Available(client_factory=_client_factory)


@lru_cache
def get_provider_capability() -> ProviderCapability:
    """Process-wide capability, resolved on first use (app startup)."""
    return load_provider_capability()
