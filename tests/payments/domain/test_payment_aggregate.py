"""Domain tests for the Payment aggregate and its gateway synchronisation."""

import pytest
from payments.gateway.port import IntentSnapshot
from payments.payment.events import PaymentIntentCreated, PaymentStatusChanged
from payments.payment.payment import Money, Payment
from payments.payment.status import PaymentStatus
from protean.exceptions import ValidationError


def _payment(amount="210.00"):
    return Payment.create(
        order_id="ord-001",
        order_number="A1B2C3",
        payment_intent_id="pi_test_001",
        amount=Money.of(amount, "USD"),
    )


def _intent(status, **fields):
    return IntentSnapshot(id="pi_test_001", status=status, **fields)


class TestCreate:
    def test_new_payment_is_pending(self):
        payment = _payment()
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.refunded_amount == Money.zero("USD")
        assert payment.created_at is not None

    def test_raises_intent_created(self):
        event = _payment()._events[0]
        assert isinstance(event, PaymentIntentCreated)
        assert event.amount == "210.00"
        assert event.payment_intent_id == "pi_test_001"


class TestTransitions:
    def test_mark_succeeded(self):
        payment = _payment()
        payment.mark_succeeded("pm_visa", {"type": "card", "card": {"brand": "visa"}})
        assert payment.status == PaymentStatus.SUCCEEDED.value
        assert payment.paid_at is not None
        assert payment.stripe_payment_method_id == "pm_visa"
        assert payment.get_payment_method_details()["card"]["brand"] == "visa"

    def test_mark_failed(self):
        payment = _payment()
        payment.mark_failed("Your card was declined.", "card_declined")
        assert payment.status == PaymentStatus.FAILED.value
        assert payment.failed_at is not None
        assert payment.failure_reason == "Your card was declined."
        assert payment.failure_code == "card_declined"

    def test_status_change_raises_event(self):
        payment = _payment()
        payment.transition_to(PaymentStatus.PROCESSING)
        event = payment._events[-1]
        assert isinstance(event, PaymentStatusChanged)
        assert (event.from_status, event.to_status) == ("Pending", "Processing")

    def test_reentering_status_is_silent(self):
        payment = _payment()
        payment._events.clear()
        payment.transition_to(PaymentStatus.PENDING)
        assert payment._events == []

    def test_illegal_transition(self):
        payment = _payment()
        payment.mark_failed("declined")
        with pytest.raises(ValidationError) as exc:
            payment.mark_succeeded()
        assert exc.value.messages == {"status": ["Cannot transition from Failed to Succeeded"]}


class TestRefunds:
    def test_full_refund(self):
        payment = _payment()
        payment.mark_succeeded()
        payment.mark_refunded()
        assert payment.status == PaymentStatus.REFUNDED.value
        assert payment.refunded_amount == payment.amount
        assert payment.refunded_at is not None

    def test_refund_of_pending_payment_rejected(self):
        payment = _payment()
        with pytest.raises(ValidationError):
            payment.mark_refunded()
        assert payment.refunded_amount == Money.zero("USD")

    def test_partial_then_full_refund(self):
        payment = _payment("100.00")
        payment.mark_succeeded()

        payment.record_refund(Money.of("40", "USD"))
        assert payment.status == PaymentStatus.PARTIALLY_REFUNDED.value
        assert payment.remaining_amount() == Money.of("60", "USD")

        payment.record_refund(Money.of("60", "USD"))
        assert payment.status == PaymentStatus.REFUNDED.value
        assert not payment.can_be_refunded()

    def test_refund_above_remaining_rejected(self):
        payment = _payment("100.00")
        payment.mark_succeeded()
        with pytest.raises(ValidationError) as exc:
            payment.record_refund(Money.of("100.01", "USD"))
        assert exc.value.messages == {"amount": ["Refund amount exceeds remaining payment amount"]}


class TestGatewaySync:
    def test_sync_success_copies_intent_details(self):
        payment = _payment()
        applied = payment.sync_from_intent(
            _intent(
                "succeeded",
                payment_method="pm_card",
                customer="cus_123",
                metadata={"order_id": "ord-001"},
                payment_method_details={"type": "card", "card": {"brand": "visa", "last4": "4242"}},
            )
        )
        assert applied is True
        assert payment.is_successful()
        assert payment.stripe_payment_method_id == "pm_card"
        assert payment.stripe_customer_id == "cus_123"
        assert payment.get_metadata() == {"order_id": "ord-001"}
        assert payment.get_payment_method_details()["card"]["last4"] == "4242"

    def test_requires_action_keeps_pending(self):
        payment = _payment()
        assert payment.sync_from_intent(_intent("requires_action")) is True
        assert payment.status == PaymentStatus.PENDING.value

    def test_unknown_status_is_not_applied(self):
        payment = _payment()
        assert payment.apply_gateway_status("mystery") is False
        assert payment.status == PaymentStatus.PENDING.value

    def test_late_processing_does_not_downgrade_success(self):
        payment = _payment()
        payment.mark_succeeded("pm_card")
        assert payment.apply_gateway_status("processing") is False
        assert payment.status == PaymentStatus.SUCCEEDED.value

    def test_requires_refund_refunds_succeeded_payment(self):
        payment = _payment()
        payment.mark_succeeded()
        assert payment.apply_gateway_status("requires_refund") is True
        assert payment.status == PaymentStatus.REFUNDED.value
        assert payment.refunded_amount == payment.amount
