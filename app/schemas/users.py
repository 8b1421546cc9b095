from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import UserRole, UserStatus, normalize_email, normalize_text


class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    photo_url: str | None = None
    role: UserRole
    status: UserStatus = UserStatus.ACTIVE
    suspend_reason: str | None = None
    suspend_feedback: str | None = None
    role_updated_by: str | None = None
    role_updated_at: datetime | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None


class UserUpsertRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    photo_url: str | None = Field(default=None, max_length=1024)
    role: str | None = None

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("name")
    @classmethod
    def require_name(cls, v: str) -> str:
        value = normalize_text(v)
        if not value:
            raise ValueError("Name cannot be empty")
        return value

    def requested_role(self) -> UserRole:
        """Only "manager" may be self-selected at sign-up; everything else is a borrower."""
        if self.role == UserRole.MANAGER.value:
            return UserRole.MANAGER
        return UserRole.BORROWER


class UserRoleUpdate(BaseModel):
    role: UserRole
    status: UserStatus | None = None
    suspend_reason: str | None = Field(default=None, max_length=255)
    suspend_feedback: str | None = None


class UserRoleResponse(BaseModel):
    email: str
    role: UserRole
