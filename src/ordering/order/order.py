"""Order aggregate: the immutable record of a purchase.

An order is assembled once from a draft (see ``ordering.order.builder``) and
afterwards only moves forward through its status machine or is handed over
from a guest to a registered customer. Line items snapshot the product name,
SKU and price at purchase time and are never re-synced with the catalogue.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED → REFUNDED
    PENDING/CONFIRMED → CANCELLED → REFUNDED
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import InvalidOrderData
from ordering.order.events import OrderConvertedToCustomer, OrderPlaced, OrderStatusChanged
from ordering.shared.address import Address
from ordering.shared.contact import EmailAddress, PersonName, PhoneNumber
from ordering.shared.money import Money

DEFAULT_CURRENCY = "USD"

ORDER_NUMBER_LENGTH = 20


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

# Timestamp stamped when the order enters a status
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class OrderNumber:
    """Human-facing order reference: upper-case letters, digits and hyphens."""

    value = String(required=True, max_length=ORDER_NUMBER_LENGTH)

    @invariant.post
    def must_be_upper_case_alphanumeric(self):
        if not re.fullmatch(r"[A-Z0-9-]{1,20}", self.value or ""):
            raise ValidationError({"order_number": [f"Invalid order number: {self.value}"]})

    @classmethod
    def generate(cls, prefix: str | None = None) -> "OrderNumber":
        random_part = uuid4().hex.upper()
        if prefix:
            return cls(value=f"{prefix.strip().upper()}-{random_part}"[:ORDER_NUMBER_LENGTH])
        return cls(value=random_part[:ORDER_NUMBER_LENGTH])

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line item holding a purchase-time snapshot of the product."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_sku = String(required=True, max_length=64)
    unit_price = ValueObject(Money, required=True)
    quantity = Integer(required=True, min_value=1)
    total_price = ValueObject(Money, required=True)

    @classmethod
    def snapshot(cls, product, quantity: int, unit_price: Money):
        """Copy name, SKU and price from ``product`` into a new line item."""
        return cls(
            product_id=str(product.id),
            product_name=product.name,
            product_sku=product.sku,
            unit_price=unit_price,
            quantity=quantity,
            total_price=unit_price.multiply(quantity),
        )

    def reprice(self, unit_price: Money | None = None, quantity: int | None = None) -> None:
        """Change unit price and/or quantity, recomputing the line total."""
        unit_price = unit_price if unit_price is not None else self.unit_price
        quantity = quantity if quantity is not None else self.quantity
        self.unit_price = unit_price
        self.quantity = quantity
        self.total_price = unit_price.multiply(quantity)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = ValueObject(OrderNumber, required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    items = HasMany(OrderItem)

    # Buyer: a registered customer or guest contact details, never both
    customer_id = Identifier()
    customer_email = String(max_length=254)
    customer_name = String(max_length=201)
    guest_email = ValueObject(EmailAddress)
    guest_name = ValueObject(PersonName)
    guest_phone = ValueObject(PhoneNumber)

    subtotal = ValueObject(Money)
    tax_amount = ValueObject(Money)
    shipping_amount = ValueObject(Money)
    discount_amount = ValueObject(Money)
    total = ValueObject(Money)

    billing_address = ValueObject(Address)
    shipping_address = ValueObject(Address)
    notes = Text()
    order_metadata = Text()  # JSON object

    placed_at = DateTime()
    confirmed_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def buyer_is_either_customer_or_guest(self):
        if self.customer_id and self.guest_email:
            raise ValidationError({"customer": ["An order cannot belong to a customer and a guest at the same time"]})

    @invariant.post
    def amounts_share_order_currency(self):
        amounts = [self.subtotal, self.tax_amount, self.shipping_amount, self.discount_amount, self.total]
        amounts.extend(item.unit_price for item in self.items)
        for money in amounts:
            if money is not None and money.currency != self.currency:
                raise ValidationError(
                    {"currency": [f"All amounts must be in {self.currency}, found {money.currency}"]}
                )

    @invariant.post
    def total_equals_subtotal_plus_adjustments(self):
        if self.total is None:
            return
        expected = (
            self.subtotal.decimal
            + self.tax_amount.decimal
            + self.shipping_amount.decimal
            - self.discount_amount.decimal
        )
        if self.total.decimal != expected:
            raise ValidationError({"total": ["Total must equal subtotal + tax + shipping - discount"]})

    # -------------------------------------------------------------------
    # Assembly (used by the order builder)
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, currency: str | None = None, order_number: OrderNumber | None = None):
        """Begin a new pending order with no items."""
        return cls(
            order_number=order_number or OrderNumber.generate(),
            currency=currency or DEFAULT_CURRENCY,
            status=OrderStatus.PENDING.value,
            updated_at=datetime.now(UTC),
        )

    def adopt_currency(self, currency: str) -> None:
        if self.items:
            raise InvalidOrderData("Currency can only be set before items are added")
        self.currency = currency

    def add_line(self, item: OrderItem) -> None:
        self.add_items(item)

    def apply_totals(self, subtotal: Money, tax: Money, shipping: Money, discount: Money) -> None:
        """Set the four amounts and derive ``total`` from them."""
        for label, money in (("tax amount", tax), ("shipping amount", shipping), ("discount amount", discount)):
            if money.currency != self.currency:
                raise InvalidOrderData(
                    f"{label.capitalize()} currency mismatch. Expected {self.currency}, got {money.currency}"
                )

        gross = subtotal.add(tax).add(shipping)
        if discount.decimal > gross.decimal:
            raise InvalidOrderData("Discount amount cannot exceed the order amount")

        with atomic_change(self):
            self.subtotal = subtotal
            self.tax_amount = tax
            self.shipping_amount = shipping
            self.discount_amount = discount
            self.total = gross.subtract(discount)

    def apply_details(
        self,
        billing_address: Address | None = None,
        shipping_address: Address | None = None,
        notes: str | None = None,
        metadata: dict | None = None,
    ) -> None:
        if billing_address is not None:
            self.billing_address = billing_address
        if shipping_address is not None:
            self.shipping_address = shipping_address
        if notes is not None:
            self.notes = notes
        if metadata is not None:
            self.order_metadata = json.dumps(metadata, sort_keys=True, default=str)

    def assign_guest(self, email: EmailAddress, name: PersonName, phone: PhoneNumber | None = None) -> None:
        with atomic_change(self):
            self.guest_email = email
            self.guest_name = name
            self.guest_phone = phone

    def assign_customer(self, customer) -> None:
        with atomic_change(self):
            self.customer_id = str(customer.id)
            self.customer_email = customer.email.address
            self.customer_name = customer.name.full_name

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def assert_valid(self) -> None:
        if not self.items:
            raise InvalidOrderData("Order must contain at least one item")
        if self.total is None:
            raise InvalidOrderData("Order totals have not been computed")

    def assert_valid_guest_order(self) -> None:
        if self.guest_email is None:
            raise InvalidOrderData("Guest orders must include an email address")
        if self.guest_name is None:
            raise InvalidOrderData("Guest orders must include a customer name")
        self.assert_valid()

    def place(self) -> None:
        """Stamp the order as placed once it is fully assembled."""
        self.assert_valid()
        if not self.customer_id and self.guest_email is None:
            raise InvalidOrderData("Order must belong to a customer or a guest")

        now = datetime.now(UTC)
        self.placed_at = now
        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                order_number=self.order_number.value,
                customer_id=self.customer_id,
                guest_email=self.guest_email.address if self.guest_email else None,
                currency=self.currency,
                subtotal=self.subtotal.amount,
                total=self.total.amount,
                item_count=len(self.items),
                placed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Guest to customer conversion
    # -------------------------------------------------------------------
    def convert_to_customer(self, customer) -> None:
        """Hand a guest order over to ``customer``. One-way and single-use."""
        if self.customer_id:
            raise InvalidOrderData("Order is already associated with a user account")

        previous_email = self.guest_email.address if self.guest_email else None
        now = datetime.now(UTC)

        with atomic_change(self):
            self.guest_email = None
            self.guest_name = None
            self.guest_phone = None
            self.customer_id = str(customer.id)
            self.customer_email = customer.email.address
            self.customer_name = customer.name.full_name
            self.updated_at = now

        self.assert_valid()
        self.raise_(
            OrderConvertedToCustomer(
                order_id=str(self.id),
                customer_id=str(customer.id),
                previous_guest_email=previous_email,
                converted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, target: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        if target in _STATUS_TIMESTAMPS:
            setattr(self, _STATUS_TIMESTAMPS[target], now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=current.value,
                to_status=target.value,
                changed_at=now,
            )
        )

    def can_be_cancelled(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_guest_order(self) -> bool:
        return not self.customer_id

    def contact_email(self) -> str | None:
        if self.customer_id:
            return self.customer_email
        return self.guest_email.address if self.guest_email else None

    def contact_name(self) -> str | None:
        if self.customer_id:
            return self.customer_name
        return self.guest_name.full_name if self.guest_name else None

    def contact_phone(self) -> str | None:
        return self.guest_phone.number if self.guest_phone else None

    def get_metadata(self) -> dict:
        return json.loads(self.order_metadata) if self.order_metadata else {}

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
