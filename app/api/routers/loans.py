from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.settings import settings
from app.db.session import get_db
from app.models.user import User
from app.schemas.loans import (
    LoanProductCreate,
    LoanProductDTO,
    LoanProductListResponse,
    LoanProductUpdate,
    ShowOnHomeUpdate,
)
from app.services import loans as loans_service

router = APIRouter(tags=["loans"])


@router.post("/loans", status_code=status.HTTP_201_CREATED, summary="Publish a loan product")
async def create_loan(
    payload: LoanProductCreate,
    manager: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    loan = await loans_service.create_loan(db, payload, created_by=manager.email)
    await db.commit()
    return {"message": "Loan created successfully", "data": LoanProductDTO.model_validate(loan)}


@router.get("/home-loans", summary="Loan products featured on the home page")
async def home_loans(db: AsyncSession = Depends(get_db)) -> dict:
    items = await loans_service.list_home_loans(db)
    return {"message": "Home loans fetched", "data": [LoanProductDTO.model_validate(loan) for loan in items]}


@router.get("/all-loans", summary="Paginated loan catalog")
async def all_loans(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str | None = Query(default=None, max_length=100),
    category: str | None = Query(default=None, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items, total, page, limit = await loans_service.list_loans_paginated(
        db, page=page, limit=limit, search=search, category=category
    )
    listing = LoanProductListResponse(
        items=[LoanProductDTO.model_validate(loan) for loan in items],
        total=total,
        page=page,
        limit=limit,
        total_pages=loans_service.total_pages(total, limit),
    )
    return {"message": "Loans fetched", "data": listing}


@router.get("/all-loans/{loan_id}", summary="Get a loan product by id")
async def get_loan(loan_id: UUID, db: AsyncSession = Depends(get_db)) -> dict:
    loan = await loans_service.get_loan(db, loan_id)
    return {"message": "Loan fetched", "data": LoanProductDTO.model_validate(loan)}


@router.patch("/loans/{loan_id}", summary="Update a loan product")
async def update_loan(
    loan_id: UUID,
    payload: LoanProductUpdate,
    _: User = Depends(deps.require_manager_or_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    loan = await loans_service.update_loan(db, loan_id, payload)
    await db.commit()
    return {"message": "Loan updated successfully", "data": LoanProductDTO.model_validate(loan)}


@router.delete("/loans/{loan_id}", summary="Delete a loan product")
async def delete_loan(
    loan_id: UUID,
    _: User = Depends(deps.require_manager_or_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    loan = await loans_service.delete_loan(db, loan_id)
    await db.commit()
    return {"message": "Loan deleted successfully", "data": {"id": str(loan.id)}}


@router.get("/manager/loans", summary="Loan products created by the current manager")
async def manager_loans(
    search: str | None = Query(default=None, max_length=100),
    manager: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loans_service.list_loans_by_manager(db, manager.email, search=search)
    return {"message": "Loans fetched", "data": [LoanProductDTO.model_validate(loan) for loan in items]}


@router.get("/admin/loans", summary="All loan products")
async def admin_loans(
    category: str | None = Query(default=None, max_length=100),
    _: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loans_service.list_all_loans(db, category=category)
    return {"message": "Loans fetched", "data": [LoanProductDTO.model_validate(loan) for loan in items]}


@router.patch("/admin/loans/{loan_id}/show-on-home", summary="Toggle home page visibility")
async def toggle_show_on_home(
    loan_id: UUID,
    payload: ShowOnHomeUpdate,
    _: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    loan = await loans_service.set_show_on_home(db, loan_id, payload.show_on_home)
    await db.commit()
    return {"message": "Loan visibility updated", "data": LoanProductDTO.model_validate(loan)}
