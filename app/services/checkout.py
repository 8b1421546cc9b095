from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol

import stripe
from starlette.concurrency import run_in_threadpool

from app.core.settings import settings
from app.services.exceptions import PaymentGatewayError, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CheckoutSession:
    id: str
    url: str | None
    payment_status: str
    payment_intent: str | None
    amount_total: int | None
    currency: str | None
    customer_email: str | None
    metadata: dict[str, str] = field(default_factory=dict)


class CheckoutGateway(Protocol):
    async def create_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        customer_email: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession: ...

    async def retrieve_session(self, session_id: str) -> CheckoutSession: ...


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    try:
        return obj[key]
    except (KeyError, TypeError):
        return getattr(obj, key, default)


def session_from_stripe(obj: Any) -> CheckoutSession:
    payment_intent = _get(obj, "payment_intent")
    if payment_intent is not None and not isinstance(payment_intent, str):
        payment_intent = _get(payment_intent, "id")
    customer_details = _get(obj, "customer_details") or {}
    metadata = _get(obj, "metadata") or {}
    return CheckoutSession(
        id=_get(obj, "id"),
        url=_get(obj, "url"),
        payment_status=_get(obj, "payment_status") or "unpaid",
        payment_intent=payment_intent,
        amount_total=_get(obj, "amount_total"),
        currency=_get(obj, "currency"),
        customer_email=_get(obj, "customer_email") or _get(customer_details, "email"),
        metadata={str(k): str(v) for k, v in dict(metadata).items()},
    )


class StripeCheckoutGateway:
    """Hosted checkout backed by the Stripe SDK; SDK calls run in the threadpool."""

    def __init__(self, api_key: str) -> None:
        self._client = stripe.StripeClient(api_key)

    async def create_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        customer_email: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        params = {
            "mode": "payment",
            "customer_email": customer_email,
            "line_items": [
                {
                    "price_data": {
                        "currency": currency,
                        "unit_amount": amount_cents,
                        "product_data": {"name": product_name},
                    },
                    "quantity": 1,
                }
            ],
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        try:
            session = await run_in_threadpool(self._client.checkout.sessions.create, params=params)
        except stripe.StripeError as exc:
            logger.error("Checkout session creation failed: %s", exc)
            raise PaymentGatewayError(exc.user_message or str(exc)) from exc
        return session_from_stripe(session)

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        try:
            session = await run_in_threadpool(self._client.checkout.sessions.retrieve, session_id)
        except stripe.InvalidRequestError as exc:
            raise ValidationFailed(
                "Unknown checkout session",
                code="invalid_checkout_session",
                details={"session_id": session_id},
            ) from exc
        except stripe.StripeError as exc:
            logger.error("Checkout session retrieval failed session_id=%s: %s", session_id, exc)
            raise PaymentGatewayError(exc.user_message or str(exc)) from exc
        return session_from_stripe(session)


@lru_cache(maxsize=1)
def get_checkout_gateway() -> CheckoutGateway:
    if not settings.stripe_secret_key:
        raise PaymentGatewayError("Payment processor is not configured", code="payment_not_configured")
    return StripeCheckoutGateway(settings.stripe_secret_key)
