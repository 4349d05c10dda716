from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from notification_limiter.core.rate_limit import get_notification_rate_limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Reports liveness plus notification limiter counters (no user ids).

    Returns:
        dict: ``status`` set to "ok" and a ``rate_limit`` stats object.
    """

    limiter = get_notification_rate_limiter()
    return {
        "status": "ok",
        "rate_limit": {
            **asdict(limiter.stats()),
            "cleanup_running": limiter.cleanup_running,
        },
    }
