import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.api import api_router
from core.config import get_settings
from core.error_handler import (
    ExceptionNormalizationMiddleware,
    generation_error_handler,
    global_exception_handler,
    setup_logging,
)
from core.exceptions import GenerationError
from core.middleware import BodySizeLimitMiddleware, CorrelationIdMiddleware
from services.provider import Available, get_provider_capability


logger = logging.getLogger(__name__)


def validate_cors_origins(origins: list[str]) -> list[str]:
    """Validate and sanitize CORS origins."""

    def is_valid_url(url: str) -> bool:
        parsed = urlparse(url)
        return bool(parsed.scheme in {"http", "https"} and parsed.netloc)

    validated_origins = []
    for origin in origins:
        if origin == "*" or is_valid_url(origin):
            validated_origins.append(origin)
        else:
            logger.warning("Invalid CORS origin '%s' ignored", origin)
    return validated_origins


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Resolve the provider once at startup so a missing SDK is reported early
    capability = get_provider_capability()
    settings = get_settings()
    if isinstance(capability, Available):
        logger.info("Provider SDK loaded; model=%s", settings.GENAI_MODEL)
    else:
        logger.warning("Generation disabled: %s", capability.reason)
    if not settings.api_key:
        logger.warning("No provider API key configured; generation requests will fail")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title="UIGen API",
        description="Generate UI components from natural language",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware runs in reverse registration order: CORS outermost, then
    # correlation IDs, then the body size limit, with exception normalization
    # innermost.
    app.add_middleware(ExceptionNormalizationMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=validate_cors_origins(list(settings.CORS_ORIGINS)),
        allow_credentials=settings.ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )

    app.add_exception_handler(GenerationError, generation_error_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {"message": "UIGen generation server"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("main:app", host=_settings.HOST, port=_settings.PORT, reload=True)
