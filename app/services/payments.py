from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_audit_logger
from app.core.settings import settings
from app.models.loan_application import LoanApplication
from app.models.payment import PaymentRecord
from app.schemas.common import ApplicationFeeStatus
from app.services import loan_applications
from app.services.checkout import CheckoutGateway, CheckoutSession
from app.services.exceptions import Conflict, NotFound, PermissionDenied, ValidationFailed

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()

METADATA_APPLICATION_KEY = "loanApplicationId"
METADATA_BORROWER_KEY = "borrowerEmail"
PAID = "paid"


def _success_url() -> str:
    separator = "&" if "?" in settings.checkout_success_url else "?"
    return f"{settings.checkout_success_url}{separator}session_id={{CHECKOUT_SESSION_ID}}"


def _duplicate(transaction_id: str) -> Conflict:
    return Conflict(
        "Payment already processed for this transaction",
        code="duplicate_transaction",
        details={"transaction_id": transaction_id},
    )


async def create_checkout_session(
    db: AsyncSession,
    gateway: CheckoutGateway,
    application_id: UUID,
    *,
    borrower_email: str,
) -> CheckoutSession:
    application = await loan_applications.get_application(db, application_id)
    if application.borrower_email != borrower_email:
        raise NotFound("Loan application not found", details={"application_id": str(application_id)})
    if application.application_fee_status == ApplicationFeeStatus.PAID.value:
        raise Conflict(
            "Application fee already paid",
            code="fee_already_paid",
            details={"application_id": str(application.id)},
        )
    session = await gateway.create_session(
        amount_cents=settings.application_fee_cents,
        currency=settings.payment_currency,
        product_name=f"Application fee: {application.loan_title or 'Loan application'}",
        customer_email=borrower_email,
        metadata={
            METADATA_APPLICATION_KEY: str(application.id),
            METADATA_BORROWER_KEY: borrower_email,
        },
        success_url=_success_url(),
        cancel_url=settings.checkout_cancel_url,
    )
    logger.info("Checkout session created session_id=%s application_id=%s", session.id, application.id)
    return session


async def get_payment_by_transaction(db: AsyncSession, transaction_id: str) -> PaymentRecord | None:
    stmt = select(PaymentRecord).where(PaymentRecord.transaction_id == transaction_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


def _application_id_from(session: CheckoutSession) -> UUID:
    raw = session.metadata.get(METADATA_APPLICATION_KEY)
    if not raw:
        raise ValidationFailed(
            "Checkout session is not linked to a loan application",
            code="invalid_checkout_session",
            details={"session_id": session.id},
        )
    try:
        return UUID(raw)
    except ValueError as exc:
        raise ValidationFailed(
            "Checkout session references a malformed application id",
            code="invalid_checkout_session",
            details={"session_id": session.id},
        ) from exc


async def reconcile_session(
    db: AsyncSession,
    gateway: CheckoutGateway,
    session_id: str,
    *,
    actor_email: str,
) -> tuple[PaymentRecord, LoanApplication]:
    """Record a completed checkout exactly once and mark the application fee as paid."""
    session = await gateway.retrieve_session(session_id)
    application_id = _application_id_from(session)
    application = await loan_applications.get_application(db, application_id)

    if actor_email != application.borrower_email:
        raise PermissionDenied(
            "This checkout session belongs to another borrower",
            details={"session_id": session.id},
        )

    transaction_id = session.payment_intent
    if transaction_id and await get_payment_by_transaction(db, transaction_id) is not None:
        raise _duplicate(transaction_id)
    if application.application_fee_status == ApplicationFeeStatus.PAID.value:
        raise Conflict(
            "Application fee already paid",
            code="fee_already_paid",
            details={"application_id": str(application.id), "transaction_id": application.transaction_id},
        )
    if session.payment_status != PAID or not transaction_id:
        raise ValidationFailed(
            "Payment has not been completed",
            code="payment_incomplete",
            details={"payment_status": session.payment_status},
        )

    now = datetime.now(timezone.utc)
    record = PaymentRecord(
        loan_application_id=application.id,
        transaction_id=transaction_id,
        session_id=session.id,
        customer_email=session.customer_email or application.borrower_email,
        amount=session.amount_total if session.amount_total is not None else settings.application_fee_cents,
        currency=session.currency or settings.payment_currency,
        status=session.payment_status,
        paid_at=now,
        created_at=now,
    )
    application.application_fee_status = ApplicationFeeStatus.PAID.value
    application.transaction_id = transaction_id
    application.paid_at = now
    db.add(record)
    db.add(application)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost the race against a concurrent reconciliation of the same transaction.
        await db.rollback()
        raise _duplicate(transaction_id) from exc

    audit_logger.info(
        "payment.reconciled",
        extra={
            "application_id": str(application.id),
            "transaction_id": transaction_id,
            "amount": record.amount,
            "currency": record.currency,
        },
    )
    return record, application


async def list_payments_for(db: AsyncSession, customer_email: str) -> list[PaymentRecord]:
    stmt = (
        select(PaymentRecord)
        .join(LoanApplication, LoanApplication.id == PaymentRecord.loan_application_id)
        .where(LoanApplication.borrower_email == customer_email)
        .order_by(PaymentRecord.paid_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
