"""Pytest configuration and fixtures shared across all test modules.

Environment variables are pinned before any project import so settings are
built from known values instead of a developer's .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("NOTIFY_MAX_NOTIFICATIONS", "10")
os.environ.setdefault("NOTIFY_WINDOW_MS", "60000")

import pytest

from notification_limiter.core.rate_limit import get_notification_rate_limiter


@pytest.fixture(autouse=True)
def _reset_process_limiter():
    """Give every test an empty process-wide limiter."""
    limiter = get_notification_rate_limiter()
    limiter.reset()
    yield
    limiter.reset()
