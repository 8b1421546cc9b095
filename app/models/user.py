import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("role IN ('borrower', 'manager', 'admin')", name="ck_users_role"),
        CheckConstraint("status IN ('active', 'suspended')", name="ck_users_status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    photo_url = Column(String(1024), nullable=True)
    role = Column(String(20), nullable=False, default="borrower", server_default="borrower", index=True)
    status = Column(String(20), nullable=False, default="active", server_default="active")
    suspend_reason = Column(String(255), nullable=True)
    suspend_feedback = Column(Text, nullable=True)
    role_updated_by = Column(String(255), nullable=True)
    role_updated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)
