from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    loan_application_id: UUID = Field(alias="loanApplicationId")


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: str | None = None


class PaymentRecordDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_application_id: UUID
    transaction_id: str
    session_id: str
    customer_email: str
    amount: int
    currency: str
    status: str
    paid_at: datetime
    created_at: datetime | None = None
