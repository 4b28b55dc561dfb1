"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and the draft dataclasses.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class MoneySchema(BaseModel):
    amount: str = Field(pattern=r"^\d+(\.\d{1,2})?$")
    currency: str = Field(min_length=3, max_length=3)


class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


class OrderItemDraftSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price_override: MoneySchema | None = None


class OrderDraftSchema(BaseModel):
    items: list[OrderItemDraftSchema] = Field(min_length=1)
    currency: str | None = None
    tax_amount: MoneySchema | None = None
    shipping_amount: MoneySchema | None = None
    discount_amount: MoneySchema | None = None
    billing_address: AddressSchema | None = None
    shipping_address: AddressSchema | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class GuestContactSchema(BaseModel):
    email: str
    first_name: str
    last_name: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    sku: str
    price: str = Field(pattern=r"^\d+(\.\d{1,2})?$")
    currency: str = "USD"
    stock: int = Field(ge=0, default=0)
    track_stock: bool = True
    low_stock_threshold: int = Field(ge=0, default=5)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoe",
                    "sku": "SHOE-TRL-42",
                    "price": "100.00",
                    "currency": "USD",
                    "stock": 25,
                }
            ]
        }
    }


class StockMovementRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Customer Request Schemas
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    email: str
    first_name: str
    last_name: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceGuestOrderRequest(BaseModel):
    draft: OrderDraftSchema
    guest: GuestContactSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "draft": {
                        "items": [{"product_id": "prod-001", "quantity": 2}],
                        "tax_amount": {"amount": "8.00", "currency": "USD"},
                        "shipping_amount": {"amount": "5.00", "currency": "USD"},
                        "discount_amount": {"amount": "3.00", "currency": "USD"},
                    },
                    "guest": {
                        "email": "guest@example.com",
                        "first_name": "Jamie",
                        "last_name": "Rivera",
                    },
                }
            ]
        }
    }


class PlaceCustomerOrderRequest(BaseModel):
    draft: OrderDraftSchema


class ConvertGuestOrderRequest(BaseModel):
    customer_id: str


class ClaimGuestOrderRequest(BaseModel):
    phone: str | None = None


class AdvanceOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    product_id: str


class CustomerIdResponse(BaseModel):
    customer_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str


class StockResponse(BaseModel):
    product_id: str
    stock: int
    track_stock: bool


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    product_sku: str
    unit_price: MoneySchema
    quantity: int
    total_price: MoneySchema


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    currency: str
    customer_id: str | None = None
    guest_email: str | None = None
    contact_email: str | None = None
    items: list[OrderItemResponse]
    subtotal: MoneySchema
    tax_amount: MoneySchema
    shipping_amount: MoneySchema
    discount_amount: MoneySchema
    total: MoneySchema
    notes: str | None = None
    metadata: dict[str, Any] = {}
