"""Payment confirmation: command and handler.

Confirms an existing intent at the gateway and synchronises the local
Payment from the returned snapshot. Never creates a Payment.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.errors import PaymentProcessingError
from payments.gateway import get_gateway
from payments.gateway.port import GatewayError
from payments.payment.payment import Payment


@payments.command(part_of="Payment")
class ConfirmPayment:
    payment_intent_id = String(required=True, max_length=255)
    payment_method_id = String(max_length=255)


@payments.command_handler(part_of=Payment)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.find_by_intent(command.payment_intent_id)
        if payment is None:
            raise PaymentProcessingError(f"Unable to locate payment for intent {command.payment_intent_id}")

        params = {"payment_method": command.payment_method_id} if command.payment_method_id else {}
        try:
            intent = get_gateway().confirm_payment_intent(command.payment_intent_id, params)
        except GatewayError as exc:
            logger.warning(
                "Gateway rejected payment confirmation",
                payment_intent_id=command.payment_intent_id,
                error=str(exc),
            )
            raise PaymentProcessingError("Stripe payment confirmation failed") from exc

        payment.sync_from_intent(intent)
        repo.add(payment)

        logger.info(
            "Payment confirmed",
            payment_id=str(payment.id),
            payment_intent_id=command.payment_intent_id,
            status=payment.status,
        )
        return str(payment.id)
