"""FastAPI routes for the Payments domain: intents, confirmation and webhooks."""

from fastapi import APIRouter, Header, HTTPException, Request
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.conversion import load_order
from payments.api.schemas import ConfirmPaymentRequest, MoneySchema, PaymentResponse, WebhookResponse
from payments.domain import logger
from payments.errors import PaymentNotFound
from payments.gateway import get_gateway
from payments.gateway.port import WebhookSignatureError
from payments.payment.payment import Payment
from payments.payment.service import PaymentService


def _payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        payment_id=str(payment.id),
        order_id=str(payment.order_id),
        order_number=payment.order_number,
        payment_intent_id=payment.stripe_payment_intent_id,
        payment_method_id=payment.stripe_payment_method_id,
        status=payment.status,
        amount=MoneySchema(amount=payment.amount.amount, currency=payment.amount.currency),
        refunded_amount=MoneySchema(
            amount=payment.refunded_amount.amount,
            currency=payment.refunded_amount.currency,
        )
        if payment.refunded_amount
        else None,
        payment_method_details=payment.get_payment_method_details(),
        failure_reason=payment.failure_reason,
        failure_code=payment.failure_code,
    )


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/orders/{order_id}/intent", status_code=201, response_model=PaymentResponse)
async def create_payment_intent(order_id: str) -> PaymentResponse:
    """Open (or return the existing) payment intent for an order."""
    with ordering.domain_context():
        order = load_order(order_id)
    payment = PaymentService().create_payment_intent(order)
    return _payment_response(payment)


@payment_router.post("/webhook", response_model=WebhookResponse)
async def payment_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookResponse:
    """Verify and reconcile a gateway webhook event."""
    payload = await request.body()
    try:
        event = get_gateway().construct_event(payload, stripe_signature)
    except WebhookSignatureError as exc:
        logger.warning("Rejected webhook", error=str(exc))
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    payment = PaymentService().handle_webhook_event(event)
    if payment is None:
        return WebhookResponse(status="ignored")
    return WebhookResponse(status="processed", payment_id=str(payment.id), payment_status=payment.status)


@payment_router.get("/{payment_intent_id}", response_model=PaymentResponse)
async def get_payment(payment_intent_id: str) -> PaymentResponse:
    payment = current_domain.repository_for(Payment).find_by_intent(payment_intent_id)
    if payment is None:
        raise PaymentNotFound(payment_intent_id)
    return _payment_response(payment)


@payment_router.post("/{payment_intent_id}/confirm", response_model=PaymentResponse)
async def confirm_payment(payment_intent_id: str, body: ConfirmPaymentRequest) -> PaymentResponse:
    """Confirm a payment intent with the gateway and sync the local payment."""
    payment = PaymentService().confirm_payment(payment_intent_id, body.payment_method_id)
    return _payment_response(payment)
