"""Typed failures raised by the Payments domain."""

from protean.exceptions import ObjectNotFoundError


class PaymentProcessingError(Exception):
    """A payment could not be created or confirmed.

    The gateway error, when there is one, is chained as ``__cause__``. The
    message never includes gateway internals.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Payment processing failed: {reason}")


class PaymentNotFound(ObjectNotFoundError):
    def __init__(self, intent_id):
        self.intent_id = str(intent_id)
        super().__init__({"payment_intent_id": [f"No payment found for intent {intent_id}"]})
