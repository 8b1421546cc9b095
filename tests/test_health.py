import pytest
from fastapi.testclient import TestClient

from app.core import health as health_module
from app.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def _mock_env(monkeypatch):
    monkeypatch.setattr(health_module.settings, "environment", "test")
    yield


def test_root_banner() -> None:
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] is True
    assert body["message"] == "Microloan Server is Running Fine"


def test_health_live_returns_ok() -> None:
    response = client.get("/health/live")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] is True
    assert payload["health"] == "ok"
    assert "timestamp" in payload


def test_health_ready_ok(monkeypatch) -> None:
    async def ok_db():
        return {"status": "ok"}

    monkeypatch.setattr(health_module, "_check_db", ok_db)

    response = client.get("/health/ready")
    assert response.status_code == 200
    payload = response.json()
    assert payload["health"] == "ok"
    assert payload["ready"] is True
    assert payload["environment"] == "test"
    assert payload["checks"]["database"]["status"] == "ok"


def test_health_ready_degraded(monkeypatch) -> None:
    async def bad_db():
        return {"status": "error", "error": "unreachable"}

    monkeypatch.setattr(health_module, "_check_db", bad_db)

    response = client.get("/health/ready")
    assert response.status_code == 200
    payload = response.json()
    assert payload["health"] == "degraded"
    assert payload["ready"] is False
    assert payload["checks"]["database"]["status"] == "error"


def test_request_id_is_echoed() -> None:
    response = client.get("/health/live", headers={"x-request-id": "req-abc"})
    assert response.headers["x-request-id"] == "req-abc"


def test_security_headers_present() -> None:
    response = client.get("/")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


def test_ready_treats_disabled_payments_as_healthy(monkeypatch) -> None:
    async def ok_db():
        return {"status": "ok"}

    monkeypatch.setattr(health_module, "_check_db", ok_db)
    monkeypatch.setattr(health_module.settings, "stripe_secret_key", "")

    payload = client.get("/health/ready").json()
    assert payload["ready"] is True
    assert payload["checks"]["payments"] == {"status": "disabled"}
    assert payload["checks"]["identity"] == {"status": "ok", "provider": "jwt"}


def test_ready_degraded_without_firebase_credentials(monkeypatch) -> None:
    async def ok_db():
        return {"status": "ok"}

    monkeypatch.setattr(health_module, "_check_db", ok_db)
    monkeypatch.setattr(health_module.settings, "identity_provider", "firebase")
    monkeypatch.setattr(health_module.settings, "fb_service_key", "")

    payload = client.get("/health/ready").json()
    assert payload["ready"] is False
    assert payload["checks"]["identity"]["status"] == "error"


def test_responses_are_not_cached() -> None:
    response = client.get("/health/live")
    assert response.headers["cache-control"] == "no-store"
    assert "strict-transport-security" not in response.headers
