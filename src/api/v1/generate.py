"""Component generation endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from core.config import Settings, get_settings
from schemas.api import ErrorEnvelope
from schemas.generation import GenerateRequest, GenerateResponse
from services.generation import GenerationService
from services.provider import ProviderCapability, get_provider_capability


router = APIRouter(tags=["generate"])


def get_generation_service(
    settings: Annotated[Settings, Depends(get_settings)],
    capability: Annotated[ProviderCapability, Depends(get_provider_capability)],
) -> GenerationService:
    return GenerationService(capability, settings)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={
        400: {"model": ErrorEnvelope, "description": "Prompt is required"},
        500: {"model": ErrorEnvelope, "description": "Server or provider failure"},
    },
)
async def generate_component(
    service: Annotated[GenerationService, Depends(get_generation_service)],
    request: Annotated[GenerateRequest | None, Body()] = None,
) -> GenerateResponse:
    """Generate a UI component from a natural-language description.

    A missing body is treated like an empty prompt. Domain failures are raised
    as GenerationError subclasses and rendered by the registered handler.
    """
    return await service.generate(request or GenerateRequest())
