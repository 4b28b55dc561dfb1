"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Identifier, String

from payments.domain import payments


@payments.event(part_of="Payment")
class PaymentIntentCreated:
    """A gateway payment intent was opened for an order."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    amount = String(required=True)
    currency = String(required=True)
    created_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentStatusChanged:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    failure_reason = String()
    changed_at = DateTime(required=True)
