"""In-memory fake of the Stripe payment intent API for development and testing.

Intents live in a dict keyed by id. Created intents wait in
``requires_confirmation``; confirming them succeeds with a Visa card charge
unless the gateway has been configured to fail. Every call is recorded in
``calls`` so tests can assert how often the gateway was hit.
"""

import json
from uuid import uuid4

from payments.gateway.port import (
    GatewayError,
    IntentSnapshot,
    PaymentGateway,
    PaymentIntentParams,
    WebhookSignatureError,
)

TEST_SIGNATURE = "test-signature"

DEFAULT_PAYMENT_METHOD = "pm_test"


class FakeStripeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.intents: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Make subsequent gateway calls succeed or raise ``GatewayError``."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def _check_available(self) -> None:
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

    def _get(self, intent_id: str) -> dict:
        if intent_id not in self.intents:
            raise GatewayError(f"No such payment_intent: '{intent_id}'")
        return self.intents[intent_id]

    # -------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------
    def set_status(self, intent_id: str, status: str, **fields) -> IntentSnapshot:
        """Move a stored intent to ``status`` as the real gateway would asynchronously."""
        intent = self._get(intent_id)
        intent["status"] = status
        intent.update(fields)
        return IntentSnapshot.from_payload(intent)

    def intent_payload(self, intent_id: str) -> dict:
        return dict(self._get(intent_id))

    # -------------------------------------------------------------------
    # PaymentGateway
    # -------------------------------------------------------------------
    def create_payment_intent(self, params: PaymentIntentParams) -> IntentSnapshot:
        request = params.to_request()
        self.calls.append({"method": "create_payment_intent", **request})
        self._check_available()

        intent_id = f"pi_{uuid4().hex[:24]}"
        self.intents[intent_id] = {
            "id": intent_id,
            "object": "payment_intent",
            "status": "requires_confirmation",
            "amount": request["amount"],
            "currency": request["currency"],
            "metadata": dict(request["metadata"]),
            "receipt_email": request.get("receipt_email"),
            "description": request["description"],
            "payment_method": None,
            "customer": None,
            "charges": {"data": []},
            "last_payment_error": None,
        }
        return IntentSnapshot.from_payload(self.intents[intent_id])

    def confirm_payment_intent(self, intent_id: str, params: dict | None = None) -> IntentSnapshot:
        params = params or {}
        self.calls.append({"method": "confirm_payment_intent", "intent_id": intent_id, **params})
        self._check_available()

        intent = self._get(intent_id)
        intent["status"] = "succeeded"
        intent["payment_method"] = params.get("payment_method") or DEFAULT_PAYMENT_METHOD
        intent["charges"] = {
            "data": [
                {
                    "payment_method_details": {
                        "type": "card",
                        "card": {"brand": "visa", "last4": "4242"},
                    }
                }
            ]
        }
        return IntentSnapshot.from_payload(intent)

    def retrieve_payment_intent(self, intent_id: str) -> IntentSnapshot:
        self.calls.append({"method": "retrieve_payment_intent", "intent_id": intent_id})
        self._check_available()
        return IntentSnapshot.from_payload(self._get(intent_id))

    def construct_event(self, payload: str | bytes, signature: str) -> dict:
        if signature != TEST_SIGNATURE:
            raise WebhookSignatureError("Invalid webhook signature")
        try:
            return json.loads(payload)
        except (TypeError, ValueError) as exc:
            raise WebhookSignatureError("Webhook payload is not valid JSON") from exc
