"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from gateway.api.v1.catalog_router import router as catalog_router
from gateway.api.v1.chat_router import legacy_router as legacy_chat_router
from gateway.api.v1.chat_router import router as chat_router
from gateway.core.config import settings
from gateway.core.exceptions import (
    AppException,
    app_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from gateway.core.http import close_http_client, init_http_client
from gateway.core.rate_limit import limiter, rate_limit_exceeded_handler
from gateway.core.redis import close_redis, init_redis
from gateway.providers.registry import DEFAULT_PROVIDER
from gateway.schemas.response_schema import ApiResponse, success_response

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        default_provider=DEFAULT_PROVIDER,
        gateway_configured=settings.gateway.is_configured,
    )
    init_http_client()
    try:
        await init_redis()
    except (redis.RedisError, OSError) as e:
        # tools fall back to server-level keys
        logger.warning("User settings store unavailable", error=str(e))
        await close_redis()
    yield
    await close_redis()
    await close_http_client()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Multi-provider streaming chat gateway with agent tools",
    version=VERSION,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=ApiResponse[dict])
async def health_check() -> dict:
    """Health check endpoint."""
    return success_response({"status": "healthy"})


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": VERSION,
            "docs": "/docs",
        }
    )


# Register routers
app.include_router(chat_router)
app.include_router(legacy_chat_router)
app.include_router(catalog_router)


def run() -> None:
    """Serve the app with uvicorn using the configured bind address."""
    uvicorn.run(
        "gateway.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
        reload=settings.app.is_development,
    )


if __name__ == "__main__":
    run()
