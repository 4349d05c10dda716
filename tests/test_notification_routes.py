"""HTTP tests for the guarded notification path and health endpoint."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notification_limiter.core.app_factory import create_app
from notification_limiter.core.config import settings
from notification_limiter.core.rate_limit import get_notification_rate_limiter


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(settings.rate_limit, "max_notifications", 2)
    monkeypatch.setattr(settings.rate_limit, "window_ms", 60_000)
    return TestClient(create_app())


def test_admits_until_limit_then_returns_429(client: TestClient) -> None:
    first = client.post("/v1/notifications/u1/admit")
    second = client.post("/v1/notifications/u1/admit")
    third = client.post("/v1/notifications/u1/admit")

    assert first.status_code == 200
    assert first.json() == {"user_id": "u1", "admitted": True}
    assert second.status_code == 200

    assert third.status_code == 429
    error = third.json()["error"]
    assert error["code"] == "notification_rate_limited"
    assert error["details"] == {"limit": 2, "window_ms": 60_000}
    assert "request_id" in error
    assert 0 < int(third.headers["Retry-After"]) <= 60


def test_users_are_throttled_independently(client: TestClient) -> None:
    client.post("/v1/notifications/u1/admit")
    client.post("/v1/notifications/u1/admit")

    assert client.post("/v1/notifications/u1/admit").status_code == 429
    assert client.post("/v1/notifications/u2/admit").status_code == 200


def test_retry_after_omitted_when_headers_disabled(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings.rate_limit, "include_headers", False)
    for _ in range(2):
        client.post("/v1/notifications/u1/admit")

    response = client.post("/v1/notifications/u1/admit")

    assert response.status_code == 429
    assert "Retry-After" not in response.headers


def test_disabled_throttle_admits_everything(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings.rate_limit, "enabled", False)

    statuses = {client.post("/v1/notifications/u1/admit").status_code for _ in range(5)}

    assert statuses == {200}


def test_health_reports_limiter_stats(client: TestClient) -> None:
    client.post("/v1/notifications/u1/admit")
    client.post("/v1/notifications/u1/admit")
    client.post("/v1/notifications/u1/admit")

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["rate_limit"]["admitted"] == 2
    assert body["rate_limit"]["throttled"] == 1
    assert body["rate_limit"]["entries"] == 1


def test_lifespan_starts_and_stops_sweeper(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.rate_limit, "cleanup_enabled", True)
    app = create_app()

    with TestClient(app) as client:
        assert client.get("/health").json()["rate_limit"]["cleanup_running"] is True

    assert TestClient(app).get("/health").json()["rate_limit"]["cleanup_running"] is False


def test_lifespan_respects_disabled_sweeper(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.rate_limit, "cleanup_enabled", False)

    with TestClient(create_app()) as client:
        assert client.get("/health").json()["rate_limit"]["cleanup_running"] is False


def test_overlong_user_id_rejected_before_limiter(client: TestClient) -> None:
    response = client.post(f"/v1/notifications/{'x' * 129}/admit")

    assert response.status_code == 422
    assert get_notification_rate_limiter().stats().entries == 0


def test_invalid_limit_settings_return_400(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings.rate_limit, "max_notifications", 0)

    response = client.post("/v1/notifications/u1/admit")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_rate_limit_config"
