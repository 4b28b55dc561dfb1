"""Application tests for reconciling gateway webhook events into payments."""

from types import SimpleNamespace

import pytest
from payments.payment.payment import Payment
from payments.payment.service import PaymentService
from payments.payment.status import PaymentStatus
from protean.utils.globals import current_domain


@pytest.fixture()
def payment(place_guest_order):
    return PaymentService().create_payment_intent(place_guest_order())


def _event(event_type, intent_id, status, **intent_fields):
    intent = {"id": intent_id, "object": "payment_intent", "status": status}
    intent.update(intent_fields)
    return {"id": "evt_test", "type": event_type, "data": {"object": intent}}


def _reload(payment):
    return current_domain.repository_for(Payment).get(payment.id)


class TestRecognisedEvents:
    def test_succeeded(self, payment):
        event = _event(
            "payment_intent.succeeded",
            payment.stripe_payment_intent_id,
            "succeeded",
            payment_method="pm_wh",
            metadata={"order_id": str(payment.order_id), "source": "webhook"},
            charges={"data": [{"payment_method_details": {"type": "card", "card": {"brand": "amex"}}}]},
        )

        result = PaymentService().handle_webhook_event(event)

        assert result.status == PaymentStatus.SUCCEEDED.value
        assert result.stripe_payment_method_id == "pm_wh"
        assert result.get_payment_method_details()["card"]["brand"] == "amex"
        assert result.get_metadata()["source"] == "webhook"
        assert result.paid_at is not None

    def test_payment_failed_uses_last_error(self, payment):
        event = _event(
            "payment_intent.payment_failed",
            payment.stripe_payment_intent_id,
            "requires_payment_method",
            last_payment_error={"message": "Your card was declined.", "code": "card_declined"},
        )

        result = PaymentService().handle_webhook_event(event)

        assert result.status == PaymentStatus.FAILED.value
        assert result.failure_reason == "Your card was declined."
        assert result.failure_code == "card_declined"

    def test_payment_failed_without_error_details(self, payment):
        event = _event("payment_intent.payment_failed", payment.stripe_payment_intent_id, "requires_payment_method")
        result = PaymentService().handle_webhook_event(event)
        assert result.failure_reason == "Payment failed"
        assert result.failure_code is None

    def test_processing(self, payment):
        event = _event("payment_intent.processing", payment.stripe_payment_intent_id, "processing")
        assert PaymentService().handle_webhook_event(event).status == PaymentStatus.PROCESSING.value

    def test_canceled(self, payment):
        event = _event("payment_intent.canceled", payment.stripe_payment_intent_id, "canceled")
        assert PaymentService().handle_webhook_event(event).status == PaymentStatus.CANCELLED.value

    def test_other_event_types_fall_back_to_intent_status(self, payment):
        event = _event("payment_intent.amount_capturable_updated", payment.stripe_payment_intent_id, "requires_capture")
        assert PaymentService().handle_webhook_event(event).status == PaymentStatus.PROCESSING.value

    def test_typed_event_objects_are_accepted(self, payment):
        event = SimpleNamespace(
            id="evt_obj",
            type="payment_intent.processing",
            data=SimpleNamespace(object=SimpleNamespace(id=payment.stripe_payment_intent_id, status="processing")),
        )
        assert PaymentService().handle_webhook_event(event).status == PaymentStatus.PROCESSING.value


class TestIgnoredEvents:
    def test_unknown_intent_returns_none(self, payment):
        event = _event("payment_intent.succeeded", "pi_foreign", "succeeded")
        assert PaymentService().handle_webhook_event(event) is None
        assert _reload(payment).status == PaymentStatus.PENDING.value

    def test_event_without_intent_returns_none(self):
        assert PaymentService().handle_webhook_event({"type": "payment_intent.succeeded", "data": {}}) is None

    def test_unrecognised_status_is_not_persisted(self, payment):
        before = _reload(payment).updated_at
        event = _event("payment_intent.created", payment.stripe_payment_intent_id, "mystery")

        result = PaymentService().handle_webhook_event(event)

        assert result.status == PaymentStatus.PENDING.value
        assert _reload(payment).updated_at == before

    def test_late_processing_after_success_is_ignored(self, payment):
        service = PaymentService()
        service.handle_webhook_event(_event("payment_intent.succeeded", payment.stripe_payment_intent_id, "succeeded"))
        before = _reload(payment).updated_at

        result = service.handle_webhook_event(
            _event("payment_intent.processing", payment.stripe_payment_intent_id, "processing")
        )

        assert result.status == PaymentStatus.SUCCEEDED.value
        assert _reload(payment).updated_at == before

    def test_success_after_failure_is_ignored(self, payment):
        service = PaymentService()
        service.handle_webhook_event(
            _event("payment_intent.payment_failed", payment.stripe_payment_intent_id, "requires_payment_method")
        )
        result = service.handle_webhook_event(
            _event("payment_intent.succeeded", payment.stripe_payment_intent_id, "succeeded")
        )
        assert result.status == PaymentStatus.FAILED.value


class TestRedelivery:
    def test_duplicate_success_is_idempotent(self, payment):
        service = PaymentService()
        event = _event("payment_intent.succeeded", payment.stripe_payment_intent_id, "succeeded", payment_method="pm_1")

        first = service.handle_webhook_event(event)
        second = service.handle_webhook_event(event)

        assert first.status == second.status == PaymentStatus.SUCCEEDED.value
        assert second.paid_at == first.paid_at
        assert second.stripe_payment_method_id == "pm_1"

    def test_confirmation_then_webhook_agree(self, gateway, payment):
        service = PaymentService()
        confirmed = service.confirm_payment(payment.stripe_payment_intent_id)
        intent = gateway.intent_payload(payment.stripe_payment_intent_id)
        event = {"id": "evt_2", "type": "payment_intent.succeeded", "data": {"object": intent}}

        reconciled = service.handle_webhook_event(event)

        assert reconciled.status == confirmed.status == PaymentStatus.SUCCEEDED.value
        assert reconciled.paid_at == confirmed.paid_at
