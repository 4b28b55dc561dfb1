"""Tests for normalising gateway payloads into IntentSnapshot and WebhookEvent."""

from types import SimpleNamespace

from payments.gateway.port import IntentSnapshot, PaymentIntentParams, WebhookEvent

INTENT = {
    "id": "pi_123",
    "object": "payment_intent",
    "status": "succeeded",
    "amount": 21000,
    "currency": "usd",
    "payment_method": "pm_visa",
    "customer": {"id": "cus_9"},
    "metadata": {"order_id": "ord-1"},
    "charges": {"data": [{"payment_method_details": {"type": "card", "card": {"brand": "visa"}}}]},
    "last_payment_error": None,
}


class _SdkObject:
    """Stands in for a typed SDK object exposing ``to_dict_recursive``."""

    def __init__(self, data):
        self._data = data

    def to_dict_recursive(self):
        return self._data


class TestIntentSnapshot:
    def test_from_mapping(self):
        snapshot = IntentSnapshot.from_payload(INTENT)
        assert snapshot.id == "pi_123"
        assert snapshot.status == "succeeded"
        assert snapshot.customer == "cus_9"
        assert snapshot.payment_method_details["card"]["brand"] == "visa"

    def test_from_sdk_object(self):
        assert IntentSnapshot.from_payload(_SdkObject(INTENT)) == IntentSnapshot.from_payload(INTENT)

    def test_from_attribute_object(self):
        payload = SimpleNamespace(
            id="pi_456",
            status="requires_payment_method",
            payment_method=SimpleNamespace(id="pm_1"),
            metadata={},
            last_payment_error=SimpleNamespace(message="Card declined", code="card_declined"),
        )
        snapshot = IntentSnapshot.from_payload(payload)
        assert snapshot.payment_method == "pm_1"
        assert snapshot.last_payment_error_message == "Card declined"
        assert snapshot.last_payment_error_code == "card_declined"

    def test_latest_charge_details(self):
        payload = {"id": "pi_1", "latest_charge": {"payment_method_details": {"type": "card"}}}
        assert IntentSnapshot.from_payload(payload).payment_method_details == {"type": "card"}

    def test_payload_without_id(self):
        assert IntentSnapshot.from_payload({"status": "succeeded"}) is None
        assert IntentSnapshot.from_payload("not an intent") is None

    def test_to_payload_is_readable_again(self):
        snapshot = IntentSnapshot.from_payload(INTENT)
        assert IntentSnapshot.from_payload(snapshot.to_payload()) == snapshot


class TestWebhookEvent:
    def test_from_event_mapping(self):
        event = WebhookEvent.from_payload(
            {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": INTENT}}
        )
        assert event.type == "payment_intent.succeeded"
        assert event.id == "evt_1"
        assert event.intent.id == "pi_123"

    def test_non_intent_object_is_dropped(self):
        charge = {"id": "ch_1", "object": "charge"}
        event = WebhookEvent.from_payload({"type": "charge.refunded", "data": {"object": charge}})
        assert event.intent is None

    def test_garbage(self):
        assert WebhookEvent.from_payload(None).type == ""


class TestPaymentIntentParams:
    def test_request_lower_cases_currency(self):
        params = PaymentIntentParams(amount=21000, currency="USD", metadata={}, description="Payment for order X")
        assert params.to_request() == {
            "amount": 21000,
            "currency": "usd",
            "metadata": {},
            "description": "Payment for order X",
        }

    def test_receipt_email_included_when_present(self):
        params = PaymentIntentParams(1, "usd", {}, "d", receipt_email="a@b.co")
        assert params.to_request()["receipt_email"] == "a@b.co"
