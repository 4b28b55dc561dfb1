"""Payment status machine and the gateway status mapping.

``resolve_gateway_status`` is the only place that turns a gateway intent
status into a local payment status. Both direct confirmation and webhook
reconciliation go through it.

State Machine:
    PENDING → PROCESSING → SUCCEEDED → PARTIALLY_REFUNDED → REFUNDED
    PENDING/PROCESSING → FAILED
    PENDING/PROCESSING → CANCELLED
    SUCCEEDED → REFUNDED

Re-entering the current status is always allowed and changes nothing. Any
other move out of SUCCEEDED, FAILED, CANCELLED or REFUNDED is rejected, so a
late ``processing`` event cannot downgrade a succeeded payment.
"""

from enum import Enum


class PaymentStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"
    PARTIALLY_REFUNDED = "Partially_Refunded"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {
        PaymentStatus.PROCESSING,
        PaymentStatus.SUCCEEDED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.PROCESSING: {
        PaymentStatus.SUCCEEDED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.SUCCEEDED: {PaymentStatus.REFUNDED, PaymentStatus.PARTIALLY_REFUNDED},
    PaymentStatus.PARTIALLY_REFUNDED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),  # Terminal
    PaymentStatus.CANCELLED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# Gateway (Stripe) payment intent status → local payment status
GATEWAY_STATUS_MAP = {
    "succeeded": PaymentStatus.SUCCEEDED,
    "processing": PaymentStatus.PROCESSING,
    "requires_capture": PaymentStatus.PROCESSING,
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_action": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
    "canceled": PaymentStatus.CANCELLED,
    "requires_refund": PaymentStatus.REFUNDED,
}


def can_transition(current: PaymentStatus | str, target: PaymentStatus) -> bool:
    current = PaymentStatus(current)
    return target == current or target in _VALID_TRANSITIONS.get(current, set())


def map_gateway_status(gateway_status: str | None) -> PaymentStatus | None:
    return GATEWAY_STATUS_MAP.get((gateway_status or "").strip().lower())


def resolve_gateway_status(
    current: PaymentStatus | str,
    gateway_status: str | None,
) -> tuple[PaymentStatus, bool]:
    """Return ``(new_status, applied)`` for a gateway status string.

    Unknown gateway statuses and transitions the state machine forbids come
    back as ``(current, False)``.
    """
    current = PaymentStatus(current)
    target = map_gateway_status(gateway_status)
    if target is None or not can_transition(current, target):
        return current, False
    return target, True
