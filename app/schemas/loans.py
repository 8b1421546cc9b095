from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import normalize_text


class LoanProductBase(BaseModel):
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    interest_rate: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    required_documents: list[str] = []
    emi_plans: list[str | int] = []
    image_url: str | None = Field(default=None, max_length=1024)
    show_on_home: bool = False

    @field_validator("category", "description")
    @classmethod
    def normalize_optional_text(cls, v: str | None) -> str | None:
        return normalize_text(v)


class LoanProductCreate(LoanProductBase):
    title: str = Field(min_length=1, max_length=255)
    max_loan_limit: Decimal = Field(ge=0, allow_inf_nan=False)

    @field_validator("title")
    @classmethod
    def require_title(cls, v: str) -> str:
        value = normalize_text(v)
        if not value:
            raise ValueError("Title cannot be empty")
        return value


class LoanProductUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    interest_rate: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    max_loan_limit: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    required_documents: list[str] | None = None
    emi_plans: list[str | int] | None = None
    image_url: str | None = Field(default=None, max_length=1024)
    show_on_home: bool | None = None

    @field_validator("title", "category", "description")
    @classmethod
    def normalize_optional_text(cls, v: str | None) -> str | None:
        return normalize_text(v)


class ShowOnHomeUpdate(BaseModel):
    show_on_home: bool


class LoanProductDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tracking_id: str
    title: str
    description: str | None = None
    category: str | None = None
    interest_rate: float | None = None
    max_loan_limit: float
    required_documents: list[str | int] = []
    emi_plans: list[str | int] = []
    image_url: str | None = None
    show_on_home: bool = False
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoanProductListResponse(BaseModel):
    items: list[LoanProductDTO]
    total: int
    page: int
    limit: int
    total_pages: int
