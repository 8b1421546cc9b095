import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class PaymentRecord(Base):
    __tablename__ = "payment_info"
    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_payment_info_transaction_id"),
        CheckConstraint("amount >= 0", name="ck_payment_info_amount_nonneg"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_application_id = Column(
        UUID(as_uuid=True),
        ForeignKey("loan_applications.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    transaction_id = Column(String(255), nullable=False)
    session_id = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(10), nullable=False, default="usd")
    status = Column(String(30), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
