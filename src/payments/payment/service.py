"""Payment service: the in-process API for payment intents and webhooks.

Accepts any order-like object exposing ``id``, ``order_number``, ``total``
and ``contact_email()``, so the Payments domain never imports Ordering.
"""

import json

from protean.utils.globals import current_domain

from payments.gateway.port import WebhookEvent
from payments.payment.confirmation import ConfirmPayment
from payments.payment.initiation import CreatePaymentIntent
from payments.payment.payment import Payment
from payments.payment.webhook import ReconcilePaymentWebhook


def _order_number(order) -> str | None:
    number = getattr(order, "order_number", None)
    return getattr(number, "value", number)


class PaymentService:
    def create_payment_intent(self, order) -> Payment:
        """Return the order's Payment, opening a gateway intent on first call."""
        command = CreatePaymentIntent(
            order_id=str(order.id),
            order_number=_order_number(order),
            amount=order.total.amount,
            currency=order.total.currency,
            receipt_email=order.contact_email(),
        )
        payment_id = current_domain.process(command, asynchronous=False)
        return current_domain.repository_for(Payment).get(payment_id)

    def confirm_payment(self, payment_intent_id: str, payment_method_id: str | None = None) -> Payment:
        command = ConfirmPayment(
            payment_intent_id=payment_intent_id,
            payment_method_id=payment_method_id,
        )
        payment_id = current_domain.process(command, asynchronous=False)
        return current_domain.repository_for(Payment).get(payment_id)

    def handle_webhook_event(self, event) -> Payment | None:
        """Reconcile a gateway event. Returns ``None`` for foreign intents.

        ``event`` may be a Stripe SDK object, any attribute object or a plain
        mapping shaped like ``{type, data: {object: <intent>}}``.
        """
        normalized = WebhookEvent.from_payload(event)
        if normalized.intent is None:
            return None

        command = ReconcilePaymentWebhook(
            event_type=normalized.type or "unknown",
            event_id=normalized.id,
            intent=json.dumps(normalized.intent.to_payload(), default=str),
        )
        payment_id = current_domain.process(command, asynchronous=False)
        if payment_id is None:
            return None
        return current_domain.repository_for(Payment).get(payment_id)
