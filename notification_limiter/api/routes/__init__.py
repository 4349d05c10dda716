from __future__ import annotations

from notification_limiter.api.routes.health import router as health_router
from notification_limiter.api.routes.notifications import router as notifications_router

__all__ = ["health_router", "notifications_router"]
