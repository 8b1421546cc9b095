from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_audit_logger
from app.models.user import User
from app.schemas.common import UserRole, UserStatus, normalize_email, normalize_text
from app.schemas.users import UserRoleUpdate, UserUpsertRequest
from app.services.authz import get_user_by_email
from app.services.exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def upsert_on_login(db: AsyncSession, payload: UserUpsertRequest) -> tuple[User, bool]:
    """Create the user on first login, otherwise refresh ``last_login``.

    Returns ``(user, created)``.
    """
    now = _now()
    existing = await get_user_by_email(db, payload.email)
    if existing is not None:
        existing.last_login = now
        db.add(existing)
        await db.flush()
        return existing, False

    user = User(
        email=payload.email,
        name=payload.name,
        photo_url=payload.photo_url,
        role=payload.requested_role().value,
        status=UserStatus.ACTIVE.value,
        created_at=now,
        last_login=now,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # A concurrent first login inserted the same email; fall back to refreshing that row.
        await db.rollback()
        winner = await get_user_by_email(db, payload.email)
        if winner is None:
            raise
        winner.last_login = now
        db.add(winner)
        await db.flush()
        return winner, False
    logger.info("User registered email=%s role=%s", user.email, user.role)
    return user, True


async def get_role(db: AsyncSession, email: str) -> UserRole:
    user = await get_user_by_email(db, normalize_email(email))
    if user is None:
        raise NotFound("User not found", details={"email": email})
    return UserRole(user.role)


async def list_users_for_admin(db: AsyncSession, admin_email: str) -> list[User]:
    stmt = (
        select(User)
        .where(User.email != normalize_email(admin_email))
        .order_by(User.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_role(
    db: AsyncSession,
    target_email: str,
    payload: UserRoleUpdate,
    *,
    admin_email: str,
) -> User:
    target_email = normalize_email(target_email)
    if target_email == normalize_email(admin_email) and payload.role is not UserRole.ADMIN:
        raise ValidationFailed(
            "Admins cannot remove their own admin role",
            code="self_demotion",
        )
    user = await get_user_by_email(db, target_email)
    if user is None:
        raise NotFound("User not found", details={"email": target_email})

    previous_role = user.role
    user.role = payload.role.value
    if payload.status is not None:
        user.status = payload.status.value
        if payload.status is UserStatus.ACTIVE:
            user.suspend_reason = None
            user.suspend_feedback = None
    if payload.suspend_reason is not None:
        user.suspend_reason = normalize_text(payload.suspend_reason)
    if payload.suspend_feedback is not None:
        user.suspend_feedback = payload.suspend_feedback.strip() or None
    user.role_updated_by = normalize_email(admin_email)
    user.role_updated_at = _now()
    db.add(user)
    await db.flush()
    audit_logger.info(
        "user.role_updated",
        extra={
            "target": user.email,
            "previous_role": previous_role,
            "role": user.role,
            "user_status": user.status,
            "updated_by": user.role_updated_by,
        },
    )
    return user
