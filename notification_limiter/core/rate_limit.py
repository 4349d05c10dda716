"""Process-wide notification throttle and its FastAPI wiring.

The limiter instance is created lazily and shared by every caller in the
process. Its periodic sweep is owned by the application lifespan (see
``app_factory``); nothing here starts background work on import.
"""

from __future__ import annotations

import logging
import math

from fastapi import Path

from notification_limiter.adapters.rate_limit.in_memory import InMemoryNotificationRateLimiter
from notification_limiter.core.config import settings
from notification_limiter.core.errors import RateLimitAppError, ValidationAppError

logger = logging.getLogger(__name__)


_limiter: InMemoryNotificationRateLimiter | None = None


def get_notification_rate_limiter() -> InMemoryNotificationRateLimiter:
    """Return the process-wide notification rate limiter."""

    global _limiter

    if _limiter is None:
        _limiter = InMemoryNotificationRateLimiter()
    return _limiter


def check_notification_rate_limit(
    user_id: str,
    max_notifications: int | None = None,
    window_ms: int | None = None,
) -> bool:
    """Check-and-increment the notification budget for ``user_id``.

    Args:
        user_id: Opaque, non-empty user identifier.
        max_notifications: Admission ceiling per window (configured default when None).
        window_ms: Window duration in milliseconds (configured default when None).

    Returns:
        True when the notification may be sent, False when throttled.
    """

    cfg = settings.rate_limit
    return get_notification_rate_limiter().check(
        user_id,
        max_notifications=cfg.max_notifications if max_notifications is None else max_notifications,
        window_ms=cfg.window_ms if window_ms is None else window_ms,
    )


def cleanup_rate_limit() -> None:
    """Evict expired windows from the process-wide limiter."""

    get_notification_rate_limiter().cleanup()


async def enforce_notification_rate_limit(
    user_id: str = Path(..., min_length=1, max_length=128),
) -> str:
    """FastAPI dependency guarding a per-user notification path.

    Consumes one notification from the user's budget when throttling is
    enabled and returns the user id for the route.

    Raises:
        ValidationAppError: If the configured limits are rejected by the limiter.
        RateLimitAppError: When the user's current window is exhausted.
    """

    cfg = settings.rate_limit
    if not cfg.enabled:
        return user_id

    limiter = get_notification_rate_limiter()
    try:
        admitted = limiter.check(
            user_id,
            max_notifications=cfg.max_notifications,
            window_ms=cfg.window_ms,
        )
    except ValueError as exc:
        raise ValidationAppError(code="invalid_rate_limit_config", message=str(exc)) from exc

    if admitted:
        logger.debug(
            "notification_rate_limit.allowed",
            extra={"user_id": user_id, "limit": cfg.max_notifications},
        )
        return user_id

    window = limiter.get(user_id)
    retry_after = None
    if window is not None:
        retry_after = max(0, math.ceil((window.reset_time - limiter.now()) / 1000))

    raise RateLimitAppError(
        code="notification_rate_limited",
        message="Too many notifications for this user. Try again later.",
        details={"limit": cfg.max_notifications, "window_ms": cfg.window_ms},
        retry_after_seconds=retry_after if cfg.include_headers else None,
    )
