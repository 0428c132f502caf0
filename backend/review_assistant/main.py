"""FastAPI application entry point with lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from review_assistant.api.handlers import register_exception_handlers
from review_assistant.api.health import router as health_router
from review_assistant.api.middleware import RATE_LIMIT_HEADERS, rate_limit_middleware
from review_assistant.api.pages import router as pages_router
from review_assistant.api.router import api_router
from review_assistant.config import Settings, settings
from review_assistant.dependencies import get_session_store
from review_assistant.ratelimit.limiter import RateLimiter
from review_assistant.scheduler.service import SweepScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting code review assistant...")

    session_store = get_session_store()
    await session_store.backend.initialize()
    logger.info("Session store ready (backend=%s)", session_store.backend.name)

    app.state.sweeper.start()

    yield

    app.state.sweeper.shutdown()
    await session_store.backend.close()
    logger.info("Code review assistant shut down cleanly")


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="AI Code Review Assistant API",
        description="Code review and programming chat backed by a hosted LLM",
        version=app_settings.app_version,
        lifespan=lifespan,
    )

    # Per-process rate limiting, swept periodically while the app runs
    limiter = RateLimiter(app_settings.rate_limit_requests, app_settings.rate_limit_window)
    app.state.rate_limiter = limiter
    app.state.sweeper = SweepScheduler(limiter, app_settings.rate_limit_sweep_interval)

    register_exception_handlers(app)

    # Registered before CORS so that CORS wraps it and preflights are not counted
    app.middleware("http")(rate_limit_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length", "X-Request-Id", *RATE_LIMIT_HEADERS],
        max_age=600,
    )

    app.include_router(pages_router)
    app.include_router(api_router, prefix="/api")
    app.include_router(health_router, prefix="/health", tags=["health"])

    return app


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app()
