"""
Main FastAPI application for the Chatrix AI chat service

This module creates and configures the FastAPI application with:
- CORS middleware for the web client
- AI chat route (rate-limited, authenticated by the upstream auth layer)
- Error handlers mapping subsystem errors to JSON responses
- Health check endpoint
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from chatrix import __version__
from chatrix.ai.service import AIChatService
from chatrix.api.routes import ai
from chatrix.api.schemas.ai import HealthResponse
from chatrix.config.settings import settings, Settings
from chatrix.llm.client import SUPPORTED_PROVIDERS
from chatrix.ratelimit.limiter import TieredRateLimiter
from chatrix.utils.errors import ChatrixError
from chatrix.utils.logger import mask_secret


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    Logs configuration status on startup and where rate-limit counters live.
    """
    config: Settings = app.state.config
    logger.info("🚀 Chatrix API starting...")
    logger.info(f"🔄 AI chat endpoint at POST {config.api_prefix}/ai/chat")
    logger.info(f"🔒 Rate limits: {', '.join(repr(t) for t in app.state.rate_limiter.tiers)} | storage: {config.rate_limit_storage_uri.split('://')[0]}")

    provider = config.llm_provider.lower()
    if provider not in SUPPORTED_PROVIDERS:
        logger.warning(f"⚠️  Unknown LLM provider: {provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}")
    elif config.provider_api_key():
        logger.info(
            f"✅ LLM Provider: {provider} | Model: {config.ai_model} | "
            f"API key loaded: {mask_secret(config.provider_api_key())}"
        )
    else:
        logger.warning(f"⚠️  LLM Provider: {provider} but no API key set - AI requests will return 500")

    yield

    logger.info("🛑 Chatrix API shutting down...")


async def chatrix_error_handler(request: Request, exc: ChatrixError) -> JSONResponse:
    headers = dict(getattr(request.state, "rate_limit_headers", {}))
    headers.update(exc.headers())
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


def create_app(
    ai_service: Optional[AIChatService] = None,
    rate_limiter: Optional[TieredRateLimiter] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        ai_service: Reply service (defaults to one backed by the configured provider)
        rate_limiter: Limiter shared by all requests (defaults to settings tiers)
        config: Settings override

    Returns:
        Configured FastAPI app
    """
    config = config or settings

    app = FastAPI(
        title="Chatrix API",
        description="""
    AI conversation service for the Chatrix 1-to-1 chat app.

    ## Usage

    ```bash
    curl -X POST http://localhost:8000/api/ai/chat \\
         -H "Content-Type: application/json" \\
         -H "X-User-Id: 64f0c2" \\
         -d '{"message": "hey, how are you?", "history": []}'
    ```
    """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.config = config
    app.state.ai_service = ai_service or AIChatService(config=config)
    app.state.rate_limiter = rate_limiter or TieredRateLimiter.from_settings(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset", "RateLimit-Policy", "Retry-After"],
    )

    app.add_exception_handler(ChatrixError, chatrix_error_handler)
    app.include_router(ai.router, prefix=config.api_prefix)

    @app.get("/", tags=["root"])
    async def root():
        """
        Root endpoint - API information
        """
        return {
            "service": "Chatrix API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "ai_chat": f"{config.api_prefix}/ai/chat"
            }
        }

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """
        Health check endpoint

        Returns:
            HealthResponse with service status
        """
        return HealthResponse(status="healthy", service="chatrix-api", version=__version__)

    return app


app = create_app()
