"""Domain events for the Order aggregate.

Events are immutable facts raised when an order is placed, converted from a
guest order to a customer order, or moved through its lifecycle.
"""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was assembled from a draft and persisted."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    guest_email = String()
    currency = String(required=True)
    subtotal = String(required=True)
    total = String(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderConvertedToCustomer:
    """A guest order now belongs to a registered customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_guest_email = String()
    converted_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)
