"""Shared test fixtures for pytest.

ENVIRONMENT is forced to "test" before the app is imported so settings never
read a local .env file. Provider access is always replaced by a fake client;
no test talks to a real model.
"""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


os.environ["ENVIRONMENT"] = "test"

from client.api import GenerationRequest
from client.progress import ProgressSimulator
from core.config import Settings, get_settings
from main import app
from services.provider import Available, Unavailable, get_provider_capability


get_settings.cache_clear()


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "ENVIRONMENT": "test",
        "GENAI_API_KEY": "test-genai-key",
        "GEMINI_API_KEY": None,
        "GOOGLE_API_KEY": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


def make_genai_client(
    text: str | None = "```html\n<div>Card</div>\n```",
    error: BaseException | None = None,
) -> SimpleNamespace:
    """Stand-in for google.genai.Client exposing ``aio.models.generate_content``."""
    generate_content = AsyncMock()
    if error is not None:
        generate_content.side_effect = error
    else:
        generate_content.return_value = SimpleNamespace(text=text)
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(
        generate_content=generate_content
    )))


@dataclass
class ProviderStub:
    """Controls what the fake provider returns for API tests."""

    client: SimpleNamespace = field(default_factory=make_genai_client)
    api_keys: list[str] = field(default_factory=list)
    factory_error: Exception | None = None

    def capability(self) -> Available:
        def factory(api_key: str) -> SimpleNamespace:
            self.api_keys.append(api_key)
            if self.factory_error is not None:
                raise self.factory_error
            return self.client

        return Available(client_factory=factory)

    @property
    def generate_content(self) -> AsyncMock:
        return self.client.aio.models.generate_content


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def override_app(
    provider_stub: ProviderStub,
) -> Generator[Callable[..., None], None, None]:
    """Install settings/provider overrides; returns a hook to change them."""

    def configure(*, settings: Settings | None = None, unavailable: bool = False):
        resolved = settings or make_settings()
        app.dependency_overrides[get_settings] = lambda: resolved
        if unavailable:
            app.dependency_overrides[get_provider_capability] = lambda: Unavailable(
                reason="No module named 'google'"
            )
        else:
            capability = provider_stub.capability()
            app.dependency_overrides[get_provider_capability] = lambda: capability

    configure()
    yield configure
    app.dependency_overrides.pop(get_settings, None)
    app.dependency_overrides.pop(get_provider_capability, None)


@pytest.fixture
def client(override_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.
    """
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture
async def async_client(override_app) -> AsyncGenerator[AsyncClient, None]:
    """Async client bound to the app through ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


# --- client-side helpers ----------------------------------------------------


@dataclass
class RecordingNotifier:
    """Keeps every notice in order."""

    notices: list[tuple[str, str]] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [m for level, m in self.notices if level == "error"]

    @property
    def successes(self) -> list[str]:
        return [m for level, m in self.notices if level == "success"]


class FakeGenerationApi:
    """Records requests; returns ``result`` or raises it if an exception."""

    def __init__(self, result: str | BaseException = "") -> None:
        self.result = result
        self.requests: list[GenerationRequest] = []
        self.gate: Any = None

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fake_api() -> FakeGenerationApi:
    return FakeGenerationApi()


@pytest.fixture
def fast_progress() -> ProgressSimulator:
    """Progress simulator with millisecond timings and a seeded RNG."""
    import random

    return ProgressSimulator(
        tick_interval=0.001, hold_seconds=0.01, rng=random.Random(1234)
    )
