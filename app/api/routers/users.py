from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.security import Identity
from app.db.session import get_db
from app.models.user import User
from app.schemas.users import UserDTO, UserRoleResponse, UserRoleUpdate, UserUpsertRequest
from app.services import users as users_service

router = APIRouter(tags=["users"])


@router.post("/users", summary="Create the user on first login or refresh last_login")
async def upsert_user(
    payload: UserUpsertRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict:
    user, created = await users_service.upsert_on_login(db, payload)
    await db.commit()
    if created:
        response.status_code = status.HTTP_201_CREATED
        message = "User created successfully"
    else:
        message = "User already exists"
    return {"message": message, "data": UserDTO.model_validate(user)}


@router.get("/users/role", summary="Get the stored role of the current user")
async def get_my_role(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    role = await users_service.get_role(db, identity.email)
    return {"message": "Role fetched", "data": UserRoleResponse(email=identity.email, role=role)}


@router.get("/admin/users", summary="List every user except the requesting admin")
async def list_users(
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await users_service.list_users_for_admin(db, admin.email)
    return {
        "message": "Users fetched",
        "data": [UserDTO.model_validate(user) for user in items],
        "total": len(items),
    }


@router.patch("/admin/users/{email}/role", summary="Update a user's role and suspension state")
async def update_user_role(
    email: str,
    payload: UserRoleUpdate,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await users_service.update_role(db, email, payload, admin_email=admin.email)
    await db.commit()
    return {"message": "User role updated", "data": UserDTO.model_validate(user)}
