import logging

from fastapi import FastAPI

from app.core.settings import settings
from app.db.init_db import init_db
from app.db.session import engine

logger = logging.getLogger(__name__)


def _warn_on_incomplete_configuration() -> None:
    if settings.identity_provider == "firebase" and not settings.fb_service_key:
        logger.warning("FB_SERVICE_KEY is not set; authenticated requests will be rejected")
    if settings.identity_provider == "jwt" and settings.jwt_secret_key == "change-me":
        logger.warning("JWT identity provider is using the default secret")
    if not settings.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY is not set; checkout endpoints will fail")


def register_event_handlers(app: FastAPI) -> None:
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info(
            "Microloan backend starting",
            extra={"environment": settings.environment, "identity_provider": settings.identity_provider},
        )
        _warn_on_incomplete_configuration()
        await init_db()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed")
