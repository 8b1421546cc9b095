from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.context import bind_actor
from app.core.security import Identity, IdentityVerificationError, IdentityVerifier, get_identity_verifier
from app.db.session import get_db
from app.models.user import User
from app.schemas.common import UserRole
from app.services import authz
from app.services.checkout import CheckoutGateway, get_checkout_gateway

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session(db: AsyncSession = Depends(get_db)) -> AsyncSession:
    return db


def get_verifier() -> IdentityVerifier:
    return get_identity_verifier()


def get_gateway() -> CheckoutGateway:
    return get_checkout_gateway()


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_verifier),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized access",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        identity = await verifier.verify(credentials.credentials)
    except IdentityVerificationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Unauthorized access", "error": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    bind_actor(identity.email)
    return identity


def require_role(*roles: UserRole):
    """Build a guard that admits only users whose stored role is one of ``roles``."""
    allowed_roles = frozenset(roles)
    label = " or ".join(role.value for role in roles)

    async def dependency(
        identity: Identity = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db_session),
    ) -> User:
        decision = await authz.check_role(db, identity.email, allowed_roles)
        if not decision.allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": f"Forbidden: {label} access required",
                    "role": decision.actual_role.value if decision.actual_role else None,
                },
            )
        return decision.user

    return dependency


require_manager = require_role(UserRole.MANAGER)
require_admin = require_role(UserRole.ADMIN)
require_manager_or_admin = require_role(UserRole.MANAGER, UserRole.ADMIN)
