from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_audit_logger
from app.models.loan import LoanProduct
from app.models.loan_application import LoanApplication
from app.schemas.common import (
    LIKE_ESCAPE,
    ApplicationFeeStatus,
    LoanApplicationStatus,
    UserRole,
    contains_pattern,
)
from app.schemas.loan_applications import LoanApplicationCreate
from app.services.exceptions import Conflict, NotFound, PermissionDenied

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _current_status(application: LoanApplication) -> LoanApplicationStatus:
    return LoanApplicationStatus(application.status)


# Approved and rejected are terminal; cancellation deletes the row instead of transitioning.
_ALLOWED_TRANSITIONS: dict[LoanApplicationStatus, frozenset[LoanApplicationStatus]] = {
    LoanApplicationStatus.PENDING: frozenset(
        {LoanApplicationStatus.APPROVED, LoanApplicationStatus.REJECTED}
    ),
    LoanApplicationStatus.APPROVED: frozenset(),
    LoanApplicationStatus.REJECTED: frozenset(),
}


def _validate_transition(application: LoanApplication, next_status: LoanApplicationStatus) -> None:
    current = _current_status(application)
    if next_status not in _ALLOWED_TRANSITIONS[current]:
        raise Conflict(
            f"Cannot move a {current.value} application to {next_status.value}",
            code="invalid_status_transition",
            details={"current_status": current.value, "requested_status": next_status.value},
        )


async def create_application(
    db: AsyncSession,
    payload: LoanApplicationCreate,
    *,
    borrower_email: str,
    borrower_name: str | None = None,
) -> LoanApplication:
    application = LoanApplication(
        borrower_email=borrower_email,
        borrower_name=payload.borrower_name or borrower_name,
        loan_title=payload.loan_title,
        first_name=payload.first_name,
        last_name=payload.last_name,
        contact_number=payload.contact_number,
        national_id=payload.national_id,
        income_source=payload.income_source,
        monthly_income=payload.monthly_income,
        loan_amount=payload.loan_amount,
        reason=payload.reason,
        address=payload.address,
        extra_notes=payload.extra_notes,
        status=LoanApplicationStatus.PENDING.value,
        application_fee_status=ApplicationFeeStatus.UNPAID.value,
        created_at=_now(),
    )
    if payload.loan_id is not None:
        loan_result = await db.execute(select(LoanProduct).where(LoanProduct.id == payload.loan_id))
        loan = loan_result.scalar_one_or_none()
        if loan is None:
            raise NotFound("Loan not found", details={"loan_id": str(payload.loan_id)})
        application.loan_id = loan.id
        application.loan_title = loan.title
        application.loan_category = loan.category
        application.interest_rate = loan.interest_rate
    db.add(application)
    await db.flush()
    logger.info("Loan application submitted id=%s borrower=%s", application.id, borrower_email)
    return application


async def get_application(db: AsyncSession, application_id: UUID) -> LoanApplication:
    stmt = select(LoanApplication).where(LoanApplication.id == application_id)
    result = await db.execute(stmt)
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFound("Loan application not found", details={"application_id": str(application_id)})
    return application


async def get_application_for_viewer(
    db: AsyncSession,
    application_id: UUID,
    *,
    viewer_email: str,
    viewer_role: UserRole | None,
) -> LoanApplication:
    application = await get_application(db, application_id)
    if application.borrower_email == viewer_email:
        return application
    if viewer_role in {UserRole.MANAGER, UserRole.ADMIN}:
        return application
    raise PermissionDenied(
        "You are not allowed to view this application",
        details={"role": viewer_role.value if viewer_role else None},
    )


async def list_for_borrower(db: AsyncSession, borrower_email: str) -> list[LoanApplication]:
    stmt = (
        select(LoanApplication)
        .where(LoanApplication.borrower_email == borrower_email)
        .order_by(LoanApplication.approved_at.desc().nulls_last(), LoanApplication.created_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


_STATUS_ORDERING = {
    LoanApplicationStatus.PENDING: LoanApplication.created_at,
    LoanApplicationStatus.APPROVED: LoanApplication.approved_at,
    LoanApplicationStatus.REJECTED: LoanApplication.rejected_at,
}


async def list_by_status(db: AsyncSession, status: LoanApplicationStatus) -> list[LoanApplication]:
    stmt = (
        select(LoanApplication)
        .where(LoanApplication.status == status.value)
        .order_by(_STATUS_ORDERING[status].desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_all(
    db: AsyncSession,
    *,
    status: LoanApplicationStatus | None = None,
    category: str | None = None,
) -> list[LoanApplication]:
    stmt = select(LoanApplication)
    if status is not None:
        stmt = stmt.where(LoanApplication.status == status.value)
    if category and category.strip():
        pattern = contains_pattern(category.strip())
        stmt = stmt.where(
            or_(
                LoanApplication.loan_category.ilike(pattern, escape=LIKE_ESCAPE),
                LoanApplication.loan_title.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    stmt = stmt.order_by(LoanApplication.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def approve_application(
    db: AsyncSession, application_id: UUID, *, reviewer_email: str
) -> LoanApplication:
    application = await get_application(db, application_id)
    _validate_transition(application, LoanApplicationStatus.APPROVED)
    application.status = LoanApplicationStatus.APPROVED.value
    application.approved_at = _now()
    application.reviewed_by = reviewer_email
    db.add(application)
    await db.flush()
    audit_logger.info(
        "loan_application.approved",
        extra={"application_id": str(application.id), "reviewer": reviewer_email},
    )
    return application


async def reject_application(
    db: AsyncSession, application_id: UUID, *, reviewer_email: str
) -> LoanApplication:
    application = await get_application(db, application_id)
    _validate_transition(application, LoanApplicationStatus.REJECTED)
    application.status = LoanApplicationStatus.REJECTED.value
    application.rejected_at = _now()
    application.approved_at = None
    application.reviewed_by = reviewer_email
    db.add(application)
    await db.flush()
    audit_logger.info(
        "loan_application.rejected",
        extra={"application_id": str(application.id), "reviewer": reviewer_email},
    )
    return application


async def cancel_application(
    db: AsyncSession, application_id: UUID, *, borrower_email: str
) -> LoanApplication:
    application = await get_application(db, application_id)
    if application.borrower_email != borrower_email:
        raise NotFound("Loan application not found", details={"application_id": str(application_id)})
    current = _current_status(application)
    if current is not LoanApplicationStatus.PENDING:
        raise Conflict(
            "Only pending applications can be cancelled",
            code="invalid_status_transition",
            details={"current_status": current.value},
        )
    if application.application_fee_status == ApplicationFeeStatus.PAID.value:
        raise Conflict(
            "Applications with a paid fee cannot be cancelled",
            code="fee_already_paid",
            details={"application_id": str(application.id)},
        )
    await db.delete(application)
    await db.flush()
    logger.info("Loan application cancelled id=%s borrower=%s", application.id, borrower_email)
    return application
