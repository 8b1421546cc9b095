import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"
    __table_args__ = (
        CheckConstraint("monthly_income >= 0", name="ck_loan_app_income_nonneg"),
        CheckConstraint("loan_amount >= 0", name="ck_loan_app_amount_nonneg"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_loan_app_status",
        ),
        CheckConstraint(
            "application_fee_status IN ('unpaid', 'paid')",
            name="ck_loan_app_fee_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id", ondelete="SET NULL"), nullable=True, index=True)
    loan_title = Column(String(255), nullable=True)
    loan_category = Column(String(100), nullable=True)
    interest_rate = Column(Numeric(10, 4), nullable=True)
    borrower_email = Column(String(255), nullable=False, index=True)
    borrower_name = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    contact_number = Column(String(50), nullable=True)
    national_id = Column(String(100), nullable=True)
    income_source = Column(String(255), nullable=True)
    monthly_income = Column(Numeric(18, 2), nullable=False)
    loan_amount = Column(Numeric(18, 2), nullable=False)
    reason = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    extra_notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    application_fee_status = Column(String(20), nullable=False, default="unpaid")
    transaction_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
