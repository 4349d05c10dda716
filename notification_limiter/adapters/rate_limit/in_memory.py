"""In-memory fixed-window notification rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows start at the first admitted notification for a key (not aligned to
  clock boundaries), so bursts around a window edge can admit up to twice the
  configured maximum.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import replace
from typing import Callable

from notification_limiter.adapters.rate_limit.base import (
    DEFAULT_MAX_NOTIFICATIONS,
    DEFAULT_WINDOW_MS,
    AbstractNotificationRateLimiter,
    RateLimitStats,
    RateWindow,
    build_notification_key,
)

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL_SECONDS = 5 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryNotificationRateLimiter(AbstractNotificationRateLimiter):
    """Rate limiter using a fixed time window per notification key.

    The limiter owns its store and, optionally, a periodic cleanup task. The
    cleanup task only bounds memory: an expired window that has not been swept
    yet is still treated as expired by :meth:`check`.
    """

    def __init__(self, *, clock: Callable[[], int] = _now_ms) -> None:
        """Initialize the limiter.

        Args:
            clock: Time source returning epoch milliseconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._store: dict[str, RateWindow] = {}
        self._admitted = 0
        self._throttled = 0
        self._evicted = 0
        self._cleanup_task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryNotificationRateLimiter(entries={len(self._store)}, "
            f"admitted={self._admitted}, throttled={self._throttled}, "
            f"evicted={self._evicted})"
        )

    def check(
        self,
        user_id: str,
        max_notifications: int = DEFAULT_MAX_NOTIFICATIONS,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> bool:
        """Admit or throttle one notification for ``user_id``.

        Admitting mutates the stored window (create, replace or increment).
        Throttling leaves the window untouched and logs a warning.

        Args:
            user_id: Opaque, non-empty user identifier.
            max_notifications: Admission ceiling per window.
            window_ms: Window duration in milliseconds.

        Returns:
            True when admitted, False when throttled.

        Raises:
            ValueError: If user_id is empty or limits are not positive.
        """
        if not user_id:
            raise ValueError("user_id must be a non-empty string")
        if max_notifications < 1:
            raise ValueError("max_notifications must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        key = build_notification_key(user_id)

        with self._lock:
            now = self._clock()
            window = self._store.get(key)

            if window is None or now >= window.reset_time:
                self._store[key] = RateWindow(count=1, reset_time=now + window_ms)
                self._admitted += 1
                return True

            if window.count < max_notifications:
                window.count += 1
                self._admitted += 1
                return True

            self._throttled += 1
            reset_time = window.reset_time

        logger.warning(
            "notification_rate_limit.exceeded user_id=%s",
            user_id,
            extra={
                "user_id": user_id,
                "limit": max_notifications,
                "window_ms": window_ms,
                "reset_time": reset_time,
            },
        )
        return False

    def cleanup(self) -> int:
        """Remove every window whose reset time has passed.

        Returns:
            Number of windows removed.
        """
        with self._lock:
            now = self._clock()
            expired_keys = [k for k, w in self._store.items() if w.reset_time <= now]
            for key in expired_keys:
                del self._store[key]
            self._evicted += len(expired_keys)
            remaining = len(self._store)

        logger.debug(
            "notification_rate_limit.cleanup",
            extra={"evicted": len(expired_keys), "entries": remaining},
        )
        return len(expired_keys)

    def now(self) -> int:
        """Current time in epoch milliseconds, per the limiter clock."""
        return self._clock()

    def get(self, user_id: str) -> RateWindow | None:
        """Return a copy of the stored window for ``user_id`` (if any)."""
        with self._lock:
            window = self._store.get(build_notification_key(user_id))
            return replace(window) if window else None

    def stats(self) -> RateLimitStats:
        with self._lock:
            return RateLimitStats(
                entries=len(self._store),
                admitted=self._admitted,
                throttled=self._throttled,
                evicted=self._evicted,
            )

    def reset(self) -> None:
        """Drop all windows and counters."""
        with self._lock:
            self._store.clear()
            self._admitted = 0
            self._throttled = 0
            self._evicted = 0

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def start_cleanup_task(
        self, interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS
    ) -> asyncio.Task[None]:
        """Start the periodic cleanup sweep on the running event loop.

        Calling this while a sweep is already running returns the existing task.

        Args:
            interval_seconds: Delay between sweeps.

        Returns:
            The cancellable sweep task.

        Raises:
            ValueError: If interval_seconds is not positive.
            RuntimeError: If called outside a running event loop.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        if self._cleanup_task is not None and not self._cleanup_task.done():
            return self._cleanup_task

        self._cleanup_task = asyncio.get_running_loop().create_task(
            self._run_cleanup_loop(interval_seconds),
            name="notification-rate-limit-cleanup",
        )
        logger.info(
            "notification_rate_limit.sweeper_started",
            extra={"interval_s": interval_seconds},
        )
        return self._cleanup_task

    async def stop_cleanup_task(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task = self._cleanup_task
        self._cleanup_task = None
        if task is None:
            return

        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Propagate cancellation aimed at the caller, not at the sweep.
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.info("notification_rate_limit.sweeper_stopped")

    async def _run_cleanup_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.cleanup()
            except Exception:
                logger.exception("notification_rate_limit.cleanup_failed")
