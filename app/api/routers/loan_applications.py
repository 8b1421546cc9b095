from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.security import Identity
from app.db.session import get_db
from app.models.user import User
from app.schemas.common import LoanApplicationStatus, UserRole
from app.schemas.loan_applications import LoanApplicationCreate, LoanApplicationDTO, LoanApplicationListResponse
from app.services import authz, loan_applications

router = APIRouter(tags=["loan-applications"])


def _listing(items) -> LoanApplicationListResponse:
    return LoanApplicationListResponse(
        items=[LoanApplicationDTO.model_validate(application) for application in items],
        total=len(items),
    )


@router.post(
    "/loan-applications",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a loan application",
)
async def create_loan_application(
    payload: LoanApplicationCreate = Body(...),
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    application = await loan_applications.create_application(
        db, payload, borrower_email=identity.email, borrower_name=identity.name
    )
    await db.commit()
    return {
        "message": "Loan application submitted successfully",
        "data": LoanApplicationDTO.model_validate(application),
    }


@router.get("/my-loan-applications", summary="Applications submitted by the current user")
async def my_loan_applications(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loan_applications.list_for_borrower(db, identity.email)
    return {"message": "Loan applications fetched", "data": _listing(items)}


@router.get("/loan-applications/pending", summary="Pending applications awaiting review")
async def pending_applications(
    _: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loan_applications.list_by_status(db, LoanApplicationStatus.PENDING)
    return {"message": "Pending applications fetched", "data": _listing(items)}


@router.get("/loan-applications/approved", summary="Approved applications")
async def approved_applications(
    _: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loan_applications.list_by_status(db, LoanApplicationStatus.APPROVED)
    return {"message": "Approved applications fetched", "data": _listing(items)}


@router.get("/admin/loan-applications", summary="Every application, newest first")
async def all_applications(
    status_filter: LoanApplicationStatus | None = Query(default=None, alias="status"),
    category: str | None = Query(default=None, max_length=100),
    _: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await loan_applications.list_all(db, status=status_filter, category=category)
    return {"message": "Loan applications fetched", "data": _listing(items)}


@router.get("/loan-applications/{application_id}", summary="Get a loan application by id")
async def get_loan_application(
    application_id: UUID,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    viewer = await authz.get_user_by_email(db, identity.email)
    viewer_role = UserRole(viewer.role) if viewer is not None else None
    application = await loan_applications.get_application_for_viewer(
        db, application_id, viewer_email=identity.email, viewer_role=viewer_role
    )
    return {"message": "Loan application fetched", "data": LoanApplicationDTO.model_validate(application)}


@router.patch("/loan-applications/{application_id}/approve", summary="Approve a pending application")
async def approve_loan_application(
    application_id: UUID,
    manager: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    application = await loan_applications.approve_application(
        db, application_id, reviewer_email=manager.email
    )
    await db.commit()
    return {"message": "Loan application approved", "data": LoanApplicationDTO.model_validate(application)}


@router.patch("/loan-applications/{application_id}/reject", summary="Reject a pending application")
async def reject_loan_application(
    application_id: UUID,
    manager: User = Depends(deps.require_manager),
    db: AsyncSession = Depends(get_db),
) -> dict:
    application = await loan_applications.reject_application(
        db, application_id, reviewer_email=manager.email
    )
    await db.commit()
    return {"message": "Loan application rejected", "data": LoanApplicationDTO.model_validate(application)}


@router.delete("/loan-applications/{application_id}", summary="Cancel a pending application")
async def cancel_loan_application(
    application_id: UUID,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    application = await loan_applications.cancel_application(
        db, application_id, borrower_email=identity.email
    )
    await db.commit()
    return {"message": "Loan application cancelled", "data": {"id": str(application.id)}}
