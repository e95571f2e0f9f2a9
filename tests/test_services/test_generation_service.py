"""Unit tests for GenerationService check ordering and defaults."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import make_settings
from core.exceptions import (
    CredentialMissingError,
    DependencyMissingError,
    InvalidInputError,
    ProviderError,
)
from schemas.generation import GenerateRequest
from services.generation import GenerationService
from services.provider import Unavailable


class FakeCapability:
    """Available-like capability returning one shared adapter."""

    def __init__(self, text: str = "```html\n<p>ok</p>\n```") -> None:
        self.adapter = AsyncMock()
        self.adapter.generate.return_value = text
        self.created: list[tuple[str, str]] = []

    def create_adapter(self, api_key: str, model: str):
        self.created.append((api_key, model))
        return self.adapter


class BrokenCapability:
    def create_adapter(self, api_key: str, model: str):
        raise RuntimeError("SDK misconfigured")


@pytest.mark.asyncio
class TestGenerationService:
    async def test_success_returns_raw_text(self) -> None:
        capability = FakeCapability()
        service = GenerationService(capability, make_settings())  # type: ignore[arg-type]

        response = await service.generate(
            GenerateRequest(prompt="A card", framework="html-css-js")
        )

        assert response.code == "```html\n<p>ok</p>\n```"
        capability.adapter.generate.assert_awaited_once_with("A card", "html-css-js")
        assert capability.created == [("test-genai-key", "gemini-2.5-flash")]

    async def test_framework_defaults_only_when_absent(self) -> None:
        capability = FakeCapability()
        service = GenerationService(capability, make_settings())  # type: ignore[arg-type]

        await service.generate(GenerateRequest(prompt="A card"))
        await service.generate(GenerateRequest(prompt="A card", framework=""))

        calls = capability.adapter.generate.await_args_list
        assert calls[0].args == ("A card", "html-css")
        assert calls[1].args == ("A card", "")

    async def test_dependency_checked_first(self) -> None:
        service = GenerationService(
            Unavailable(reason="missing"), make_settings(GENAI_API_KEY=None)
        )

        with pytest.raises(DependencyMissingError):
            await service.generate(GenerateRequest(prompt=""))

    async def test_credentials_checked_before_prompt(self) -> None:
        capability = FakeCapability()
        service = GenerationService(
            capability, make_settings(GENAI_API_KEY=None)  # type: ignore[arg-type]
        )

        with pytest.raises(CredentialMissingError):
            await service.generate(GenerateRequest(prompt=""))
        capability.adapter.generate.assert_not_awaited()

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    async def test_blank_prompt_rejected(self, prompt: str) -> None:
        capability = FakeCapability()
        service = GenerationService(capability, make_settings())  # type: ignore[arg-type]

        with pytest.raises(InvalidInputError):
            await service.generate(GenerateRequest(prompt=prompt))
        assert capability.created == []

    async def test_prompt_is_forwarded_unstripped(self) -> None:
        capability = FakeCapability()
        service = GenerationService(capability, make_settings())  # type: ignore[arg-type]

        await service.generate(GenerateRequest(prompt="  A card  "))

        assert capability.adapter.generate.await_args.args[0] == "  A card  "

    async def test_adapter_setup_failure_is_wrapped(self) -> None:
        capability = BrokenCapability()
        service = GenerationService(capability, make_settings())  # type: ignore[arg-type]

        with pytest.raises(ProviderError) as exc_info:
            await service.generate(GenerateRequest(prompt="A card"))

        assert exc_info.value.details == "SDK misconfigured"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
