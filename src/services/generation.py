"""Generation proxy service: validation, credentials and provider invocation."""

from __future__ import annotations

import logging

from core.config import Settings
from core.exceptions import (
    CredentialMissingError,
    DependencyMissingError,
    InvalidInputError,
    ProviderError,
)
from schemas.generation import GenerateRequest, GenerateResponse
from services.provider import ProviderCapability, Unavailable


logger = logging.getLogger(__name__)

# Prompt excerpt length used in log lines
LOG_PROMPT_CHARS = 80


class GenerationService:
    """Turn a validated GenerateRequest into the provider's raw text.

    Checks run in a fixed order: provider availability, then credentials, then
    the prompt itself. The provider is called at most once per request.
    """

    def __init__(self, capability: ProviderCapability, settings: Settings) -> None:
        self.capability = capability
        self.settings = settings

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        if isinstance(self.capability, Unavailable):
            raise DependencyMissingError()

        api_key = self.settings.api_key
        if not api_key:
            raise CredentialMissingError()

        prompt = request.prompt
        if not prompt or not prompt.strip():
            raise InvalidInputError()

        framework = (
            request.framework
            if request.framework is not None
            else self.settings.DEFAULT_FRAMEWORK
        )

        logger.info(
            "Generating component: framework=%s model=%s prompt=%r",
            framework,
            self.settings.GENAI_MODEL,
            prompt[:LOG_PROMPT_CHARS],
        )
        try:
            adapter = self.capability.create_adapter(
                api_key, self.settings.GENAI_MODEL
            )
        except Exception as exc:
            logger.error("Provider client setup failed: %s", exc, exc_info=True)
            raise ProviderError.from_exception(exc) from exc
        code = await adapter.generate(prompt, framework)
        logger.info("Provider returned %d chars", len(code))
        return GenerateResponse(code=code)
