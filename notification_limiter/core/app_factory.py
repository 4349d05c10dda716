"""Application factory for the FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from notification_limiter.api.routes import health_router, notifications_router
from notification_limiter.core.config import settings
from notification_limiter.core.exception_handlers import setup_exception_handlers
from notification_limiter.core.logging import configure_logging
from notification_limiter.core.middleware import request_id_middleware
from notification_limiter.core.openapi import apply_openapi_customizations
from notification_limiter.core.rate_limit import get_notification_rate_limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the limiter's periodic sweep for the lifetime of the app."""

    limiter = get_notification_rate_limiter()
    cfg = settings.rate_limit
    if cfg.cleanup_enabled:
        limiter.start_cleanup_task(cfg.cleanup_interval_seconds)
    try:
        yield
    finally:
        await limiter.stop_cleanup_task()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with lifespan, middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Notification Throttle",
        description=(
            "Process-local, best-effort notification throttle: a fixed-window "
            "counter per user that admits or rejects outgoing notifications."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(notifications_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info("app_created", extra={"app_env": settings.app_env})
    return app
