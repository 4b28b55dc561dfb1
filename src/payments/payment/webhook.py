"""Payment webhook reconciliation: command and handler.

Webhook delivery is at-least-once and unordered. Events for intents this
instance never created are ignored. Events whose target status the state
machine forbids (a late ``processing`` after ``succeeded``) are logged and
dropped without a write.
"""

import json

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway.port import IntentSnapshot
from payments.payment.payment import Payment
from payments.payment.status import PaymentStatus

DEFAULT_FAILURE_MESSAGE = "Payment failed"

# Event types with a fixed target status; anything else maps the intent status
_EVENT_TARGETS = {
    "payment_intent.succeeded": PaymentStatus.SUCCEEDED,
    "payment_intent.payment_failed": PaymentStatus.FAILED,
    "payment_intent.processing": PaymentStatus.PROCESSING,
    "payment_intent.canceled": PaymentStatus.CANCELLED,
}


@payments.command(part_of="Payment")
class ReconcilePaymentWebhook:
    event_type = String(required=True, max_length=100)
    event_id = String(max_length=255)
    intent = Text(required=True)  # JSON intent snapshot


def _apply_event(payment: Payment, event_type: str, intent: IntentSnapshot) -> bool:
    target = _EVENT_TARGETS.get(event_type)
    if target is None:
        return payment.apply_gateway_status(intent.status)

    if not payment.can_transition_to(target):
        logger.info(
            "Stale payment event ignored",
            payment_id=str(payment.id),
            status=payment.status,
            event_type=event_type,
        )
        return False

    if target == PaymentStatus.SUCCEEDED:
        payment.mark_succeeded(
            intent.payment_method or payment.stripe_payment_method_id,
            intent.payment_method_details,
        )
    elif target == PaymentStatus.FAILED:
        payment.mark_failed(
            intent.last_payment_error_message or DEFAULT_FAILURE_MESSAGE,
            intent.last_payment_error_code,
        )
    else:
        payment.transition_to(target)
    return True


@payments.command_handler(part_of=Payment)
class PaymentWebhookHandler:
    @handle(ReconcilePaymentWebhook)
    def reconcile(self, command):
        intent = IntentSnapshot.from_payload(json.loads(command.intent))
        if intent is None:
            logger.info("Webhook event without payment intent ignored", event_type=command.event_type)
            return None

        repo = current_domain.repository_for(Payment)
        payment = repo.find_by_intent(intent.id)
        if payment is None:
            logger.info(
                "Webhook event for unknown payment intent ignored",
                event_type=command.event_type,
                event_id=command.event_id,
                payment_intent_id=intent.id,
            )
            return None

        if _apply_event(payment, command.event_type, intent):
            payment.refresh_from_intent(intent)
            repo.add(payment)
            logger.info(
                "Webhook event applied",
                payment_id=str(payment.id),
                event_type=command.event_type,
                status=payment.status,
            )

        return str(payment.id)
