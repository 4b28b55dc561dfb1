"""Application tests for get-or-create payment intents."""

import pytest
from payments.errors import PaymentProcessingError
from payments.payment.payment import Payment
from payments.payment.service import PaymentService
from payments.payment.status import PaymentStatus
from protean.utils.globals import current_domain


class TestCreatePaymentIntent:
    def test_creates_pending_payment(self, gateway, place_guest_order):
        order = place_guest_order()

        payment = PaymentService().create_payment_intent(order)

        assert payment.status == PaymentStatus.PENDING.value
        assert payment.order_id == str(order.id)
        assert payment.order_number == order.order_number.value
        assert payment.amount.amount == "210.00"
        assert payment.amount.currency == "USD"
        assert payment.stripe_payment_intent_id in gateway.intents

    def test_gateway_request(self, gateway, place_guest_order):
        order = place_guest_order()
        PaymentService().create_payment_intent(order)

        [call] = gateway.calls_to("create_payment_intent")
        assert call["amount"] == 21000
        assert call["currency"] == "usd"
        assert call["metadata"] == {"order_id": str(order.id), "order_number": order.order_number.value}
        assert call["receipt_email"] == "guest@example.com"
        assert call["description"] == f"Payment for order {order.order_number.value}"

    def test_second_call_returns_existing_payment(self, gateway, place_guest_order):
        order = place_guest_order()
        service = PaymentService()

        first = service.create_payment_intent(order)
        second = service.create_payment_intent(order)

        assert str(first.id) == str(second.id)
        assert len(gateway.calls_to("create_payment_intent")) == 1
        assert current_domain.repository_for(Payment)._dao.query.all().total == 1

    def test_zero_total_rejected(self, gateway, place_guest_order):
        order = place_guest_order(quantity=1, tax="0", shipping="0", discount="100.00")

        with pytest.raises(PaymentProcessingError) as exc:
            PaymentService().create_payment_intent(order)

        assert str(exc.value) == "Payment processing failed: Order total must be greater than zero to create a payment."
        assert gateway.calls == []

    def test_gateway_failure_is_wrapped(self, gateway, place_guest_order):
        gateway.configure(should_succeed=False, failure_reason="api_key_expired: sk_live_...")
        order = place_guest_order()

        with pytest.raises(PaymentProcessingError) as exc:
            PaymentService().create_payment_intent(order)

        assert str(exc.value) == "Payment processing failed: Unable to create Stripe payment intent"
        assert "sk_live" not in str(exc.value)
        assert exc.value.__cause__ is not None
        assert current_domain.repository_for(Payment).find_by_order(order.id) is None

    def test_intent_created_event_stored(self, place_guest_order):
        payment = PaymentService().create_payment_intent(place_guest_order())
        messages = current_domain.event_store.store.read(f"payments::payment-{payment.id}")
        assert "Payments.PaymentIntentCreated.v1" in [m.metadata.headers.type for m in messages]
