"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and the gateway snapshot types.
"""

from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ConfirmPaymentRequest(BaseModel):
    payment_method_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"payment_method_id": "pm_card_visa"}],
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class MoneySchema(BaseModel):
    amount: str
    currency: str


class PaymentResponse(BaseModel):
    payment_id: str
    order_id: str
    order_number: str | None = None
    payment_intent_id: str
    payment_method_id: str | None = None
    status: str
    amount: MoneySchema
    refunded_amount: MoneySchema | None = None
    payment_method_details: dict[str, Any] = {}
    failure_reason: str | None = None
    failure_code: str | None = None


class WebhookResponse(BaseModel):
    status: str
    payment_id: str | None = None
    payment_status: str | None = None
