import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.db.base import Base


class LoanProduct(Base):
    __tablename__ = "loans"
    __table_args__ = (
        UniqueConstraint("tracking_id", name="uq_loans_tracking_id"),
        CheckConstraint("max_loan_limit >= 0", name="ck_loans_max_limit_nonneg"),
        CheckConstraint("interest_rate >= 0", name="ck_loans_interest_rate_nonneg"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tracking_id = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    interest_rate = Column(Numeric(10, 4), nullable=True)
    max_loan_limit = Column(Numeric(18, 2), nullable=False)
    required_documents = Column(JSONB, nullable=False, default=list)
    emi_plans = Column(JSONB, nullable=False, default=list)
    image_url = Column(String(1024), nullable=True)
    show_on_home = Column(Boolean, nullable=False, default=False, server_default="false", index=True)
    created_by = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)
