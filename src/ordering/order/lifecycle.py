"""Order lifecycle: advance an order through its status machine."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.conversion import load_order
from ordering.order.order import Order, OrderStatus


@ordering.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@ordering.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(AdvanceOrderStatus)
    def advance_status(self, command):
        order = load_order(command.order_id)
        order.change_status(OrderStatus(command.status))
        current_domain.repository_for(Order).add(order)
        return order.status
