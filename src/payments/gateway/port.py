"""Payment gateway port (abstract interface) and the canonical intent shapes.

Adapters translate whatever their SDK returns into ``IntentSnapshot`` so the
payment code never has to care whether a payload arrived as a typed SDK
object, a generic attribute object or a plain mapping.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class GatewayError(Exception):
    """Any failure reported by, or while talking to, the payment gateway."""


class WebhookSignatureError(GatewayError):
    """A webhook payload failed signature verification."""


def to_plain(value: Any) -> Any:
    """Recursively convert SDK objects and attribute objects to dicts/lists."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]

    for converter in ("to_dict_recursive", "to_dict"):
        method = getattr(value, converter, None)
        if callable(method):
            return to_plain(method())

    if hasattr(value, "__dict__"):
        return {key: to_plain(item) for key, item in vars(value).items() if not key.startswith("_")}
    return str(value)


def _first_charge(intent: dict) -> dict:
    charges = intent.get("charges")
    if isinstance(charges, dict):
        data = charges.get("data") or []
        if data and isinstance(data[0], dict):
            return data[0]
    latest_charge = intent.get("latest_charge")
    if isinstance(latest_charge, dict):
        return latest_charge
    return {}


@dataclass(frozen=True)
class IntentSnapshot:
    """Point-in-time view of a gateway payment intent."""

    id: str
    status: str | None = None
    amount: int | None = None
    currency: str | None = None
    payment_method: str | None = None
    customer: str | None = None
    metadata: dict = field(default_factory=dict)
    payment_method_details: dict | None = None
    last_payment_error_message: str | None = None
    last_payment_error_code: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "IntentSnapshot | None":
        """Normalize an intent payload. Returns ``None`` when it has no id."""
        intent = to_plain(payload)
        if not isinstance(intent, dict) or not intent.get("id"):
            return None

        payment_method = intent.get("payment_method")
        if isinstance(payment_method, dict):
            payment_method = payment_method.get("id")

        customer = intent.get("customer")
        if isinstance(customer, dict):
            customer = customer.get("id")

        last_error = intent.get("last_payment_error") or {}

        return cls(
            id=str(intent["id"]),
            status=intent.get("status"),
            amount=intent.get("amount"),
            currency=intent.get("currency"),
            payment_method=payment_method,
            customer=customer,
            metadata=dict(intent.get("metadata") or {}),
            payment_method_details=_first_charge(intent).get("payment_method_details"),
            last_payment_error_message=last_error.get("message"),
            last_payment_error_code=last_error.get("code"),
        )

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "object": "payment_intent",
            "status": self.status,
            "amount": self.amount,
            "currency": self.currency,
            "payment_method": self.payment_method,
            "customer": self.customer,
            "metadata": self.metadata,
            "charges": {"data": [{"payment_method_details": self.payment_method_details}]}
            if self.payment_method_details
            else {"data": []},
            "last_payment_error": {
                "message": self.last_payment_error_message,
                "code": self.last_payment_error_code,
            }
            if self.last_payment_error_message or self.last_payment_error_code
            else None,
        }


@dataclass(frozen=True)
class WebhookEvent:
    """A gateway event reduced to its type and the payment intent it carries."""

    type: str
    intent: IntentSnapshot | None = None
    id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "WebhookEvent":
        event = to_plain(payload)
        if not isinstance(event, dict):
            return cls(type="")

        data = event.get("data") or {}
        obj = data.get("object") if isinstance(data, dict) else None
        intent = None
        if isinstance(obj, dict) and obj.get("object", "payment_intent") == "payment_intent":
            intent = IntentSnapshot.from_payload(obj)

        return cls(type=str(event.get("type") or ""), intent=intent, id=event.get("id"))


@dataclass(frozen=True)
class PaymentIntentParams:
    """Parameters for creating a gateway payment intent."""

    amount: int  # minor units
    currency: str
    metadata: dict
    description: str
    receipt_email: str | None = None

    def to_request(self) -> dict:
        params = {
            "amount": self.amount,
            "currency": self.currency.lower(),
            "metadata": self.metadata,
            "description": self.description,
        }
        if self.receipt_email:
            params["receipt_email"] = self.receipt_email
        return params


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(self, params: PaymentIntentParams) -> IntentSnapshot:
        """Create a remote payment intent."""
        ...

    @abstractmethod
    def confirm_payment_intent(self, intent_id: str, params: dict | None = None) -> IntentSnapshot:
        """Confirm a remote payment intent, optionally with a payment method."""
        ...

    @abstractmethod
    def retrieve_payment_intent(self, intent_id: str) -> IntentSnapshot:
        ...

    @abstractmethod
    def construct_event(self, payload: str | bytes, signature: str) -> Any:
        """Verify a webhook payload and return the decoded event.

        Raises ``WebhookSignatureError`` when verification fails.
        """
        ...
