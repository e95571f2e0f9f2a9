"""HTTP client for the generation proxy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from client.exceptions import GenerationRequestError


logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:5000"
GENERATE_PATH = "/api/generate"
# Provider calls routinely take tens of seconds
DEFAULT_TIMEOUT = httpx.Timeout(120.0, connect=10.0)


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """One submission; the framework is omitted from the wire when absent."""

    prompt: str
    framework: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"prompt": self.prompt}
        if self.framework is not None:
            payload["framework"] = self.framework
        return payload


class GenerationApiClient:
    """Issue ``POST /api/generate`` and return the raw ``code`` text.

    Any failure (non-2xx status, transport error, undecodable body) is raised
    as :class:`GenerationRequestError`; callers do not inspect server error
    codes.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER_URL,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout
        )

    async def generate(self, request: GenerationRequest) -> str:
        try:
            response = await self._client.post(GENERATE_PATH, json=request.to_payload())
        except httpx.HTTPError as exc:
            logger.warning("Generation request failed to complete: %s", exc)
            raise GenerationRequestError("Generation failed") from exc

        if response.is_error:
            server_error = _error_message(response)
            logger.warning(
                "Generation request returned HTTP %s: %s",
                response.status_code,
                server_error,
            )
            raise GenerationRequestError(
                "Generation failed",
                status_code=response.status_code,
                server_error=server_error,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GenerationRequestError(
                "Generation response was not JSON", status_code=response.status_code
            ) from exc

        code = data.get("code") if isinstance(data, dict) else None
        return str(code) if code else ""

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GenerationApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str | None:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None
