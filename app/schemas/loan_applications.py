from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import ApplicationFeeStatus, LoanApplicationStatus, normalize_text


class LoanApplicationCreate(BaseModel):
    loan_id: UUID | None = None
    loan_title: str | None = Field(default=None, max_length=255)
    borrower_name: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    contact_number: str | None = Field(default=None, max_length=50)
    national_id: str | None = Field(default=None, max_length=100)
    income_source: str | None = Field(default=None, max_length=255)
    monthly_income: Decimal = Field(ge=0, allow_inf_nan=False)
    loan_amount: Decimal = Field(ge=0, allow_inf_nan=False)
    reason: str | None = None
    address: str | None = None
    extra_notes: str | None = None

    @field_validator(
        "loan_title",
        "borrower_name",
        "first_name",
        "last_name",
        "contact_number",
        "national_id",
        "income_source",
    )
    @classmethod
    def normalize_optional_text(cls, v: str | None) -> str | None:
        return normalize_text(v)


class LoanApplicationDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_id: UUID | None = None
    loan_title: str | None = None
    loan_category: str | None = None
    interest_rate: float | None = None
    borrower_email: str
    borrower_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    contact_number: str | None = None
    national_id: str | None = None
    income_source: str | None = None
    monthly_income: float
    loan_amount: float
    reason: str | None = None
    address: str | None = None
    extra_notes: str | None = None
    status: LoanApplicationStatus
    application_fee_status: ApplicationFeeStatus
    transaction_id: str | None = None
    paid_at: datetime | None = None
    reviewed_by: str | None = None
    created_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None


class LoanApplicationListResponse(BaseModel):
    items: list[LoanApplicationDTO]
    total: int
