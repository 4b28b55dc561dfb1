"""Order drafts: caller-supplied input shapes consumed by the order builder.

Drafts are immutable and validate themselves on construction. They can be
flattened to plain JSON payloads so they travel inside commands.
"""

from dataclasses import dataclass, field
from typing import Any

from ordering.errors import InvalidOrderData
from ordering.shared.address import Address
from ordering.shared.contact import EmailAddress, PersonName, PhoneNumber
from ordering.shared.money import Money
from shared.money import is_valid_currency, normalize_currency


def _money_payload(money: Money | None) -> dict | None:
    return {"amount": money.amount, "currency": money.currency} if money is not None else None


def _money_from_payload(data: dict | None) -> Money | None:
    return Money.of(data["amount"], data["currency"]) if data else None


def _address_payload(address: Address | None) -> dict | None:
    return address.to_dict() if address is not None else None


def _address_from_payload(data: dict | None) -> Address | None:
    return Address(**data) if data else None


@dataclass(frozen=True)
class OrderItemDraft:
    product_id: str
    quantity: int
    unit_price_override: Money | None = None

    def __post_init__(self):
        if not str(self.product_id or "").strip():
            raise InvalidOrderData("Product ID is required", field="product_id")
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise InvalidOrderData("Quantity must be at least 1", field="quantity")
        object.__setattr__(self, "product_id", str(self.product_id).strip())

    def to_payload(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_override": _money_payload(self.unit_price_override),
        }

    @classmethod
    def from_payload(cls, data: dict) -> "OrderItemDraft":
        return cls(
            product_id=data["product_id"],
            quantity=data["quantity"],
            unit_price_override=_money_from_payload(data.get("unit_price_override")),
        )


@dataclass(frozen=True)
class OrderDraft:
    """Line items plus optional adjustments, addresses, notes and metadata.

    ``currency`` and ``notes`` are trimmed and blank values become ``None``.
    Only string keys survive in ``metadata``.
    """

    items: tuple[OrderItemDraft, ...]
    currency: str | None = None
    tax_amount: Money | None = None
    shipping_amount: Money | None = None
    discount_amount: Money | None = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = field(default=None)

    def __post_init__(self):
        items = tuple(self.items or ())
        if not items:
            raise InvalidOrderData("Order must contain at least one item", field="items")
        if not all(isinstance(item, OrderItemDraft) for item in items):
            raise InvalidOrderData("Order items must be OrderItemDraft instances", field="items")
        object.__setattr__(self, "items", items)

        currency = normalize_currency(self.currency) or None
        if currency is not None and not is_valid_currency(currency):
            raise InvalidOrderData(f"Unsupported currency: {currency}", field="currency")
        object.__setattr__(self, "currency", currency)

        notes = (self.notes or "").strip() or None
        object.__setattr__(self, "notes", notes)

        if self.metadata is not None:
            metadata = {key: value for key, value in dict(self.metadata).items() if isinstance(key, str)}
            object.__setattr__(self, "metadata", metadata)

    def to_payload(self) -> dict:
        return {
            "items": [item.to_payload() for item in self.items],
            "currency": self.currency,
            "tax_amount": _money_payload(self.tax_amount),
            "shipping_amount": _money_payload(self.shipping_amount),
            "discount_amount": _money_payload(self.discount_amount),
            "billing_address": _address_payload(self.billing_address),
            "shipping_address": _address_payload(self.shipping_address),
            "notes": self.notes,
            "metadata": self.metadata,
        }

    @classmethod
    def from_payload(cls, data: dict) -> "OrderDraft":
        return cls(
            items=tuple(OrderItemDraft.from_payload(item) for item in data.get("items") or []),
            currency=data.get("currency"),
            tax_amount=_money_from_payload(data.get("tax_amount")),
            shipping_amount=_money_from_payload(data.get("shipping_amount")),
            discount_amount=_money_from_payload(data.get("discount_amount")),
            billing_address=_address_from_payload(data.get("billing_address")),
            shipping_address=_address_from_payload(data.get("shipping_address")),
            notes=data.get("notes"),
            metadata=data.get("metadata"),
        )


@dataclass(frozen=True)
class GuestCustomerData:
    email: EmailAddress
    name: PersonName
    phone: PhoneNumber | None = None

    @classmethod
    def of(
        cls,
        email: EmailAddress | str,
        name: PersonName | str,
        last_name: str | None = None,
        phone: PhoneNumber | str | None = None,
    ) -> "GuestCustomerData":
        """Build guest data from value objects or raw strings.

        A raw first name needs ``last_name`` alongside it.
        """
        if not isinstance(email, EmailAddress):
            email = EmailAddress.of(email)

        if not isinstance(name, PersonName):
            if not (last_name or "").strip():
                raise InvalidOrderData("Last name is required when providing raw name strings", field="last_name")
            name = PersonName.of(name, last_name)

        if phone is not None and not isinstance(phone, PhoneNumber):
            phone = PhoneNumber.of(phone) if phone.strip() else None

        return cls(email=email, name=name, phone=phone)

    def to_payload(self) -> dict:
        return {
            "email": self.email.address,
            "first_name": self.name.first_name,
            "last_name": self.name.last_name,
            "phone": self.phone.number if self.phone else None,
        }

    @classmethod
    def from_payload(cls, data: dict) -> "GuestCustomerData":
        return cls.of(data["email"], data["first_name"], data.get("last_name"), data.get("phone"))
