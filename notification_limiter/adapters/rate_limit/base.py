"""Notification rate limiter interfaces.

Callers depend on this abstraction (not the concrete implementation) so the
in-process store can be swapped later without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_MAX_NOTIFICATIONS = 10
DEFAULT_WINDOW_MS = 60_000
KEY_PREFIX = "notifications:"


def build_notification_key(user_id: str) -> str:
    """Namespace a user id into a limiter store key."""
    return f"{KEY_PREFIX}{user_id}"


@dataclass
class RateWindow:
    """Counting window for a single notification key.

    Attributes:
        count: Notifications admitted in the current window.
        reset_time: Epoch milliseconds at which the window expires.
    """

    count: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitStats:
    """Snapshot of limiter activity.

    Attributes:
        entries: Windows currently held in the store (expired ones included
            until the next sweep).
        admitted: Checks that returned True since construction/reset.
        throttled: Checks that returned False since construction/reset.
        evicted: Windows removed by cleanup sweeps.
    """

    entries: int
    admitted: int
    throttled: int
    evicted: int


class AbstractNotificationRateLimiter(ABC):
    """Interface for notification rate limiters."""

    @abstractmethod
    def check(
        self,
        user_id: str,
        max_notifications: int = DEFAULT_MAX_NOTIFICATIONS,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> bool:
        """Admit or throttle one notification for ``user_id``.

        Args:
            user_id: Opaque, non-empty user identifier.
            max_notifications: Admission ceiling per window.
            window_ms: Window duration in milliseconds.

        Returns:
            True when the notification is admitted, False when throttled.
        """
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> int:
        """Evict expired windows.

        Returns:
            Number of windows removed.
        """
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> RateLimitStats:
        """Return a snapshot of limiter counters."""
        raise NotImplementedError
