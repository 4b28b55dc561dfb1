"""Order builder: turns an ``OrderDraft`` into a fully priced ``Order``.

Items are processed in draft order. Each item reserves stock eagerly through
the ``StockLedger``, so the builder must run inside the same unit of work
that persists the order; the ledger is only flushed by the caller once the
order has passed validation.
"""

from protean.exceptions import ValidationError

from ordering.domain import logger
from ordering.errors import InvalidOrderData
from ordering.order.draft import OrderDraft
from ordering.order.order import DEFAULT_CURRENCY, Order, OrderItem
from ordering.product.stock import StockLedger
from ordering.shared.money import Money


def _first_message(exc: ValidationError) -> str:
    for messages in exc.messages.values():
        if messages:
            return messages[0] if isinstance(messages, list) else str(messages)
    return "Invalid item"


class OrderBuilder:
    def __init__(self, ledger: StockLedger | None = None) -> None:
        self.ledger = ledger or StockLedger()

    def build(self, draft: OrderDraft) -> Order:
        order = Order.start(currency=draft.currency or DEFAULT_CURRENCY)
        currency = draft.currency
        subtotal = None

        for item_draft in draft.items:
            product = self.ledger.reserve(item_draft.product_id, item_draft.quantity)
            unit_price = item_draft.unit_price_override or product.price

            if currency is None:
                currency = unit_price.currency
                order.adopt_currency(currency)
            elif unit_price.currency != currency:
                raise InvalidOrderData("All order items must share the same currency")

            try:
                item = OrderItem.snapshot(product, item_draft.quantity, unit_price)
                order.add_line(item)
            except InvalidOrderData:
                raise
            except ValidationError as exc:
                raise InvalidOrderData(f"Validation failed for order item: {_first_message(exc)}") from exc

            subtotal = (subtotal or Money.zero(currency)).add(item.total_price)

        if subtotal is None:
            raise InvalidOrderData("Order must contain at least one item")

        zero = Money.zero(order.currency)
        order.apply_totals(
            subtotal=subtotal,
            tax=draft.tax_amount or zero,
            shipping=draft.shipping_amount or zero,
            discount=draft.discount_amount or zero,
        )
        order.apply_details(
            billing_address=draft.billing_address,
            shipping_address=draft.shipping_address,
            notes=draft.notes,
            metadata=draft.metadata,
        )
        order.assert_valid()

        logger.debug(
            "Order assembled",
            order_number=order.order_number.value,
            currency=order.currency,
            total=order.total.amount,
            lines=len(order.items),
        )
        return order
