from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.common import UserRole


@dataclass(slots=True, frozen=True)
class RoleDecision:
    allowed: bool
    actual_role: UserRole | None
    user: User | None = None


def _coerce_role(value: str | None) -> UserRole | None:
    if value is None:
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def check_role(
    db: AsyncSession,
    email: str,
    required_roles: Iterable[UserRole],
) -> RoleDecision:
    """Look up the stored role for ``email`` and decide whether it is one of ``required_roles``."""
    user = await get_user_by_email(db, email)
    if user is None:
        return RoleDecision(allowed=False, actual_role=None, user=None)
    actual = _coerce_role(user.role)
    allowed = actual is not None and actual in set(required_roles)
    return RoleDecision(allowed=allowed, actual_role=actual, user=user)
