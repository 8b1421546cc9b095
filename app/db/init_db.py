import asyncio
import logging
from datetime import datetime, timezone

from app.core.logging import get_audit_logger
from app.core.settings import settings
from app.db.session import AsyncSessionLocal
from app.models.user import User
from app.schemas.common import UserRole, UserStatus, normalize_email
from app.services.authz import get_user_by_email

logger = logging.getLogger(__name__)


async def seed_admin(session) -> User | None:
    """Create the bootstrap admin named by ``SEED_ADMIN_EMAIL`` if it does not exist yet."""
    if not settings.seed_admin_email:
        return None
    email = normalize_email(settings.seed_admin_email)
    user = await get_user_by_email(session, email)
    if user is not None:
        logger.info("Seed admin already exists email=%s", email)
        return user
    user = User(
        email=email,
        name=settings.seed_admin_name,
        role=UserRole.ADMIN.value,
        status=UserStatus.ACTIVE.value,
        created_at=datetime.now(timezone.utc),
    )
    session.add(user)
    await session.commit()
    get_audit_logger().info("user.seeded_admin", extra={"target": email})
    return user


async def init_db() -> None:
    async with AsyncSessionLocal() as session:
        await seed_admin(session)


if __name__ == "__main__":
    asyncio.run(init_db())
