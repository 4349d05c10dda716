"""Notification rate limiting adapters.

This package provides a small abstraction layer so the service can run with an
in-memory limiter today and migrate to a shared store later without changing
the API layer.
"""

from notification_limiter.adapters.rate_limit.base import (
    AbstractNotificationRateLimiter,
    RateLimitStats,
    RateWindow,
    build_notification_key,
)
from notification_limiter.adapters.rate_limit.in_memory import InMemoryNotificationRateLimiter

__all__ = [
    "AbstractNotificationRateLimiter",
    "InMemoryNotificationRateLimiter",
    "RateLimitStats",
    "RateWindow",
    "build_notification_key",
]
