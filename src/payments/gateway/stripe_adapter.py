"""Stripe payment gateway adapter backed by the stripe-python SDK."""

from typing import Any

import stripe

from payments.gateway.port import (
    GatewayError,
    IntentSnapshot,
    PaymentGateway,
    PaymentIntentParams,
    WebhookSignatureError,
)


class StripeGateway(PaymentGateway):
    """Talks to Stripe's PaymentIntent API.

    SDK errors are re-raised as ``GatewayError`` with the original exception
    chained, so callers never handle ``stripe`` types directly.
    """

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def _snapshot(self, intent) -> IntentSnapshot:
        snapshot = IntentSnapshot.from_payload(intent)
        if snapshot is None:
            raise GatewayError("Stripe returned a payment intent without an id")
        return snapshot

    def create_payment_intent(self, params: PaymentIntentParams) -> IntentSnapshot:
        try:
            intent = stripe.PaymentIntent.create(api_key=self.api_key, **params.to_request())
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or "Stripe request failed") from exc
        return self._snapshot(intent)

    def confirm_payment_intent(self, intent_id: str, params: dict | None = None) -> IntentSnapshot:
        try:
            intent = stripe.PaymentIntent.confirm(intent_id, api_key=self.api_key, **(params or {}))
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or "Stripe request failed") from exc
        return self._snapshot(intent)

    def retrieve_payment_intent(self, intent_id: str) -> IntentSnapshot:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or "Stripe request failed") from exc
        return self._snapshot(intent)

    def construct_event(self, payload: str | bytes, signature: str) -> Any:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise WebhookSignatureError("Invalid webhook signature") from exc
        except ValueError as exc:
            raise WebhookSignatureError("Webhook payload is not valid JSON") from exc
        return event
