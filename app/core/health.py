from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text

from app.core.settings import settings
from app.db.session import engine

APP_VERSION = "0.1.0"

# "disabled" marks an optional integration that is switched off, not a failure.
_HEALTHY = {"ok", "disabled"}


async def _check_db() -> dict[str, str]:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as exc:  # pragma: no cover - exercised in runtime
        return {"status": "error", "error": str(exc)}


def _check_identity() -> dict[str, str]:
    provider = settings.identity_provider
    if provider == "firebase" and not settings.fb_service_key:
        return {"status": "error", "provider": provider, "error": "FB_SERVICE_KEY is not configured"}
    return {"status": "ok", "provider": provider}


def _check_payments() -> dict[str, str]:
    if not settings.stripe_secret_key:
        return {"status": "disabled"}
    return {"status": "ok", "currency": settings.payment_currency}


def _overall_status(checks: dict[str, dict[str, Any]]) -> tuple[str, bool]:
    ready = all(check.get("status") in _HEALTHY for check in checks.values())
    return ("ok" if ready else "degraded", ready)


async def live_payload() -> dict[str, str]:
    return {
        "health": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def ready_payload() -> dict[str, Any]:
    checks = {
        "database": await _check_db(),
        "identity": _check_identity(),
        "payments": _check_payments(),
    }
    overall, ready = _overall_status(checks)
    return {
        "health": overall,
        "ready": ready,
        "environment": settings.environment,
        "version": APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
