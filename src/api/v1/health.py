from typing import Annotated

from fastapi import APIRouter, Depends

from core.config import Settings, get_settings
from schemas.api import ApiResponse
from services.provider import Available, ProviderCapability, get_provider_capability


router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict[str, str]])
def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
    capability: Annotated[ProviderCapability, Depends(get_provider_capability)],
) -> ApiResponse[dict[str, str]]:
    """Health check endpoint for monitoring and load balancer health checks."""
    return ApiResponse(
        success=True,
        data={
            "status": "healthy",
            "message": "UIGen API is running",
            "provider": "available" if isinstance(capability, Available) else "missing",
            "credentials": "configured" if settings.api_key else "missing",
        },
        message="Health check successful",
    )
