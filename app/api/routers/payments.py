from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.limiter import limiter
from app.core.security import Identity
from app.core.settings import settings
from app.db.session import get_db
from app.schemas.loan_applications import LoanApplicationDTO
from app.schemas.payments import CheckoutSessionRequest, CheckoutSessionResponse, PaymentRecordDTO
from app.services import payments
from app.services.checkout import CheckoutGateway

router = APIRouter(tags=["payments"])


@router.post("/create-checkout-session", summary="Start a hosted checkout for the application fee")
@limiter.limit(settings.checkout_rate_limit)
async def create_checkout_session(
    request: Request,
    payload: CheckoutSessionRequest,
    identity: Identity = Depends(deps.get_current_identity),
    gateway: CheckoutGateway = Depends(deps.get_gateway),
    db: AsyncSession = Depends(get_db),
) -> dict:
    session = await payments.create_checkout_session(
        db, gateway, payload.loan_application_id, borrower_email=identity.email
    )
    return {
        "message": "Checkout session created",
        "data": CheckoutSessionResponse(session_id=session.id, url=session.url),
    }


@router.patch("/payment-success", summary="Reconcile a completed checkout session")
async def payment_success(
    session_id: str = Query(..., min_length=1, max_length=255),
    identity: Identity = Depends(deps.get_current_identity),
    gateway: CheckoutGateway = Depends(deps.get_gateway),
    db: AsyncSession = Depends(get_db),
) -> dict:
    record, application = await payments.reconcile_session(
        db, gateway, session_id, actor_email=identity.email
    )
    await db.commit()
    return {
        "message": "Payment recorded",
        "data": {
            "payment": PaymentRecordDTO.model_validate(record),
            "application": LoanApplicationDTO.model_validate(application),
        },
    }


@router.get("/my-payments", summary="Application fee payments made by the current user")
async def my_payments(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> dict:
    items = await payments.list_payments_for(db, identity.email)
    return {
        "message": "Payments fetched",
        "data": [PaymentRecordDTO.model_validate(record) for record in items],
        "total": len(items),
    }
