"""Payment aggregate: the local record of a gateway payment intent.

One Payment exists per order. Its status only changes through the methods
below, which follow the state machine in ``payments.payment.status``. Both
confirmation and webhook reconciliation feed gateway snapshots in through
``sync_from_intent`` / ``apply_gateway_status``.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text, ValueObject

from payments.domain import logger, payments
from payments.gateway.port import IntentSnapshot
from payments.payment.events import PaymentIntentCreated, PaymentStatusChanged
from payments.payment.status import PaymentStatus, can_transition, resolve_gateway_status
from shared.money import is_valid_currency, normalize_amount, normalize_currency, to_decimal, to_minor_units


class PaymentMethodType(Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    WALLET = "wallet"


# Timestamp stamped when the payment enters a status
_STATUS_TIMESTAMPS = {
    PaymentStatus.SUCCEEDED: "paid_at",
    PaymentStatus.FAILED: "failed_at",
    PaymentStatus.REFUNDED: "refunded_at",
    PaymentStatus.PARTIALLY_REFUNDED: "refunded_at",
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@payments.value_object(part_of="Payment")
class Money:
    """Exact, non-negative amount in one currency, held as a decimal string."""

    amount = String(required=True, max_length=32)
    currency = String(required=True, max_length=3)

    @invariant.post
    def amount_and_currency_must_be_valid(self):
        try:
            normalized = normalize_amount(self.amount)
        except ValueError as exc:
            raise ValidationError({"amount": [f"Invalid monetary amount: {self.amount}"]}) from exc
        if normalized != self.amount or Decimal(normalized) < 0:
            raise ValidationError({"amount": [f"Invalid monetary amount: {self.amount}"]})
        if not is_valid_currency(self.currency):
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    @classmethod
    def of(cls, amount, currency: str) -> "Money":
        try:
            normalized = normalize_amount(amount)
        except ValueError as exc:
            raise ValidationError({"amount": [str(exc)]}) from exc
        return cls(amount=normalized, currency=normalize_currency(currency))

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls.of("0", currency)

    @property
    def decimal(self) -> Decimal:
        return to_decimal(self.amount)

    @property
    def minor_units(self) -> int:
        return to_minor_units(self.amount)

    def add(self, other: "Money") -> "Money":
        if other.currency != self.currency:
            raise ValidationError({"currency": [f"Cannot combine {self.currency} with {other.currency}"]})
        return Money.of(self.decimal + other.decimal, self.currency)

    def subtract(self, other: "Money") -> "Money":
        if other.currency != self.currency:
            raise ValidationError({"currency": [f"Cannot combine {self.currency} with {other.currency}"]})
        if other.decimal > self.decimal:
            raise ValidationError({"amount": ["Subtraction would result in a negative amount"]})
        return Money.of(self.decimal - other.decimal, self.currency)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@payments.aggregate
class Payment:
    order_id = Identifier(required=True, unique=True)
    order_number = String(max_length=20)
    stripe_payment_intent_id = String(required=True, max_length=255, unique=True)
    stripe_payment_method_id = String(max_length=255)
    stripe_customer_id = String(max_length=255)
    amount = ValueObject(Money, required=True)
    refunded_amount = ValueObject(Money)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethodType, default=PaymentMethodType.CARD.value)
    payment_method_details = Text()  # JSON object
    stripe_metadata = Text()  # JSON object
    failure_reason = String(max_length=500)
    failure_code = String(max_length=100)
    paid_at = DateTime()
    failed_at = DateTime()
    refunded_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def refunds_cannot_exceed_amount(self):
        if self.refunded_amount is None:
            return
        if self.refunded_amount.currency != self.amount.currency:
            raise ValidationError({"refunded_amount": ["Refunds must be in the payment currency"]})
        if self.refunded_amount.decimal > self.amount.decimal:
            raise ValidationError({"refunded_amount": ["Refunded amount cannot exceed the payment amount"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order_id: str, order_number: str | None, payment_intent_id: str, amount: Money):
        now = datetime.now(UTC)
        payment = cls(
            order_id=order_id,
            order_number=order_number,
            stripe_payment_intent_id=payment_intent_id,
            amount=amount,
            refunded_amount=Money.zero(amount.currency),
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentIntentCreated(
                payment_id=str(payment.id),
                order_id=str(order_id),
                payment_intent_id=payment_intent_id,
                amount=amount.amount,
                currency=amount.currency,
                created_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, target: PaymentStatus) -> bool:
        return can_transition(self.status, target)

    def transition_to(self, target: PaymentStatus, failure_reason: str | None = None) -> None:
        """Move to ``target``. Re-entering the current status is a no-op."""
        current = PaymentStatus(self.status)
        if target == current:
            return
        if not can_transition(current, target):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        if target in _STATUS_TIMESTAMPS:
            setattr(self, _STATUS_TIMESTAMPS[target], now)
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                payment_intent_id=self.stripe_payment_intent_id,
                from_status=current.value,
                to_status=target.value,
                failure_reason=failure_reason,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Outcomes
    # -------------------------------------------------------------------
    def mark_succeeded(self, payment_method_id: str | None = None, details: dict | None = None) -> None:
        self.transition_to(PaymentStatus.SUCCEEDED)
        if payment_method_id:
            self.stripe_payment_method_id = payment_method_id
        if details:
            self.payment_method_details = json.dumps(details, sort_keys=True)
        self.failure_reason = None
        self.failure_code = None

    def mark_failed(self, reason: str, code: str | None = None) -> None:
        self.transition_to(PaymentStatus.FAILED, failure_reason=reason)
        self.failure_reason = reason
        self.failure_code = code

    def mark_refunded(self) -> None:
        """Record a full refund of the captured amount."""
        self.transition_to(PaymentStatus.REFUNDED)
        self.refunded_amount = self.amount

    def record_refund(self, refund: Money) -> None:
        """Record a (partial) refund; the full remaining amount refunds the payment."""
        if not self.can_be_refunded():
            raise ValidationError({"status": [f"Cannot refund a payment in status {self.status}"]})
        if refund.decimal <= 0:
            raise ValidationError({"amount": ["Refund amount must be greater than zero"]})
        if refund.decimal > self.remaining_amount().decimal:
            raise ValidationError({"amount": ["Refund amount exceeds remaining payment amount"]})

        self.refunded_amount = self.refunded_amount.add(refund)
        if self.refunded_amount.decimal == self.amount.decimal:
            self.transition_to(PaymentStatus.REFUNDED)
        else:
            self.transition_to(PaymentStatus.PARTIALLY_REFUNDED)

    # -------------------------------------------------------------------
    # Gateway synchronisation
    # -------------------------------------------------------------------
    def apply_gateway_status(self, gateway_status: str | None) -> bool:
        """Apply a gateway intent status. Returns whether it was applied."""
        target, applied = resolve_gateway_status(self.status, gateway_status)
        if not applied:
            logger.debug(
                "Gateway status not applied",
                payment_id=str(self.id),
                status=self.status,
                gateway_status=gateway_status,
            )
            return False

        if target == PaymentStatus.SUCCEEDED:
            self.mark_succeeded(self.stripe_payment_method_id)
        elif target == PaymentStatus.REFUNDED:
            self.mark_refunded()
        else:
            self.transition_to(target)
        return True

    def refresh_from_intent(self, intent: IntentSnapshot) -> None:
        """Copy the payment method id and metadata from a gateway snapshot."""
        self.stripe_payment_method_id = intent.payment_method or self.stripe_payment_method_id
        self.stripe_metadata = json.dumps(intent.metadata or {}, sort_keys=True, default=str)
        self.updated_at = datetime.now(UTC)

    def sync_from_intent(self, intent: IntentSnapshot) -> bool:
        if intent.customer:
            self.stripe_customer_id = intent.customer
        self.refresh_from_intent(intent)
        applied = self.apply_gateway_status(intent.status)
        if applied and self.is_successful() and intent.payment_method_details:
            self.payment_method_details = json.dumps(intent.payment_method_details, sort_keys=True)
        return applied

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def remaining_amount(self) -> Money:
        return self.amount.subtract(self.refunded_amount or Money.zero(self.amount.currency))

    def is_successful(self) -> bool:
        return PaymentStatus(self.status) == PaymentStatus.SUCCEEDED

    def can_be_refunded(self) -> bool:
        return PaymentStatus(self.status) in {PaymentStatus.SUCCEEDED, PaymentStatus.PARTIALLY_REFUNDED}

    def get_metadata(self) -> dict:
        return json.loads(self.stripe_metadata) if self.stripe_metadata else {}

    def get_payment_method_details(self) -> dict:
        return json.loads(self.payment_method_details) if self.payment_method_details else {}


@payments.repository(part_of=Payment)
class PaymentRepository:
    def find_by_order(self, order_id) -> Payment | None:
        results = self._dao.query.filter(order_id=str(order_id)).all()
        return results.items[0] if results.items else None

    def find_by_intent(self, payment_intent_id: str) -> Payment | None:
        results = self._dao.query.filter(stripe_payment_intent_id=payment_intent_id).all()
        return results.items[0] if results.items else None
