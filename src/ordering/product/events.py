"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    price_amount = String(required=True)
    currency = String(required=True)
    stock = Integer(required=True)
    added_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockReserved:
    """Units were taken out of tracked stock for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    tracked = Boolean(default=True)


@ordering.event(part_of="Product")
class ProductRestocked:
    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    stock = Integer(required=True)
