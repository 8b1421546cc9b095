from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions
from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool

from app.core.settings import settings
from app.services.exceptions import IdentityServiceError

logger = logging.getLogger(__name__)


class IdentityVerificationError(ValueError):
    """Raised when a bearer token cannot be verified."""


class IdentityConfigError(RuntimeError):
    pass


@dataclass(slots=True, frozen=True)
class Identity:
    email: str
    uid: str | None = None
    name: str | None = None
    claims: dict[str, Any] | None = None


class IdentityVerifier(Protocol):
    async def verify(self, token: str) -> Identity: ...


def _identity_from_claims(claims: dict[str, Any]) -> Identity:
    email = claims.get("email")
    if not email:
        raise IdentityVerificationError("Token has no email claim")
    return Identity(
        email=str(email).strip().lower(),
        uid=claims.get("uid") or claims.get("sub"),
        name=claims.get("name"),
        claims=claims,
    )


def decode_service_account(encoded: str) -> dict[str, Any]:
    """Decode the base64-encoded service-account JSON held in ``FB_SERVICE_KEY``."""
    if not encoded:
        raise IdentityConfigError("FB_SERVICE_KEY is not configured")
    try:
        raw = base64.b64decode(encoded, validate=False).decode("utf-8")
        data = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise IdentityConfigError("FB_SERVICE_KEY is not valid base64-encoded JSON") from exc
    if not isinstance(data, dict):
        raise IdentityConfigError("FB_SERVICE_KEY must decode to a JSON object")
    return data


@lru_cache(maxsize=1)
def _firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    service_account = decode_service_account(settings.fb_service_key)
    logger.info("Initialising Firebase Admin for project=%s", service_account.get("project_id", "-"))
    return firebase_admin.initialize_app(credentials.Certificate(service_account))


class FirebaseIdentityVerifier:
    async def verify(self, token: str) -> Identity:
        try:
            app = _firebase_app()
        except IdentityConfigError as exc:
            logger.error("Firebase Admin is not configured: %s", exc)
            raise IdentityServiceError("Identity service is not configured") from exc
        try:
            claims = await run_in_threadpool(firebase_auth.verify_id_token, token, app)
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise IdentityVerificationError(str(exc)) from exc
        return _identity_from_claims(claims)


class JwtIdentityVerifier:
    def __init__(self, secret: str | None = None, algorithm: str | None = None) -> None:
        self.secret = secret or settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm

    async def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            raise IdentityVerificationError(str(exc)) from exc
        return _identity_from_claims(claims)


def create_identity_token(email: str, *, name: str | None = None, expires_in_seconds: int = 3600) -> str:
    """Issue a signed token accepted by :class:`JwtIdentityVerifier` (local development only)."""
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": email,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in_seconds),
    }
    if name:
        claims["name"] = name
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    if settings.identity_provider == "jwt":
        return JwtIdentityVerifier()
    return FirebaseIdentityVerifier()
