"""Payment intent creation: command and handler.

Get-or-create: an order that already has a Payment gets that Payment back
and the gateway is not called again.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.errors import PaymentProcessingError
from payments.gateway import get_gateway
from payments.gateway.port import GatewayError, PaymentIntentParams
from payments.payment.payment import Money, Payment


@payments.command(part_of="Payment")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    amount = String(required=True, max_length=32)  # decimal string, e.g. "210.00"
    currency = String(required=True, max_length=3)
    receipt_email = String(max_length=254)
    metadata = Text()  # JSON object merged into the intent metadata


@payments.command_handler(part_of=Payment)
class CreatePaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        repo = current_domain.repository_for(Payment)

        existing = repo.find_by_order(command.order_id)
        if existing is not None:
            logger.info(
                "Payment already exists for order",
                order_id=str(command.order_id),
                payment_id=str(existing.id),
            )
            return str(existing.id)

        amount = Money.of(command.amount, command.currency)
        if amount.minor_units <= 0:
            raise PaymentProcessingError("Order total must be greater than zero to create a payment.")

        metadata = json.loads(command.metadata) if command.metadata else {}
        metadata.update({"order_id": str(command.order_id), "order_number": command.order_number})
        params = PaymentIntentParams(
            amount=amount.minor_units,
            currency=amount.currency,
            metadata=metadata,
            description=f"Payment for order {command.order_number}",
            receipt_email=command.receipt_email,
        )

        try:
            intent = get_gateway().create_payment_intent(params)
        except GatewayError as exc:
            logger.warning("Gateway rejected payment intent", order_id=str(command.order_id), error=str(exc))
            raise PaymentProcessingError("Unable to create Stripe payment intent") from exc

        payment = Payment.create(
            order_id=command.order_id,
            order_number=command.order_number,
            payment_intent_id=intent.id,
            amount=amount,
        )
        payment.sync_from_intent(intent)
        repo.add(payment)

        logger.info(
            "Payment intent created",
            payment_id=str(payment.id),
            order_id=str(command.order_id),
            payment_intent_id=intent.id,
            amount=amount.amount,
            currency=amount.currency,
        )
        return str(payment.id)
