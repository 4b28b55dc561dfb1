"""Order placement: guest and customer checkout commands.

Each handler runs inside one unit of work: stock reservations made while
building the order and the order itself are committed together, or not at
all.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.domain import logger, ordering
from ordering.errors import CustomerNotFound
from ordering.order.builder import OrderBuilder
from ordering.order.draft import GuestCustomerData, OrderDraft
from ordering.order.order import Order


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


def load_customer(customer_id) -> Customer:
    try:
        return current_domain.repository_for(Customer).get(str(customer_id))
    except ObjectNotFoundError as exc:
        raise CustomerNotFound(customer_id) from exc


@ordering.command(part_of="Order")
class PlaceGuestOrder:
    draft = Text(required=True)  # JSON: OrderDraft payload
    guest = Text(required=True)  # JSON: GuestCustomerData payload


@ordering.command(part_of="Order")
class PlaceCustomerOrder:
    customer_id = Identifier(required=True)
    draft = Text(required=True)  # JSON: OrderDraft payload


@ordering.command_handler(part_of=Order)
class OrderPlacementHandler:
    @handle(PlaceGuestOrder)
    def place_guest_order(self, command):
        draft = OrderDraft.from_payload(_load_json(command.draft))
        guest = GuestCustomerData.from_payload(_load_json(command.guest))

        builder = OrderBuilder()
        order = builder.build(draft)
        order.assign_guest(guest.email, guest.name, guest.phone)
        order.assert_valid_guest_order()
        order.place()

        builder.ledger.flush()
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Guest order placed",
            order_id=str(order.id),
            order_number=order.order_number.value,
            total=order.total.amount,
            currency=order.currency,
        )
        return str(order.id)

    @handle(PlaceCustomerOrder)
    def place_customer_order(self, command):
        customer = load_customer(command.customer_id)
        draft = OrderDraft.from_payload(_load_json(command.draft))

        builder = OrderBuilder()
        order = builder.build(draft)
        order.assign_customer(customer)
        order.assert_valid()
        order.place()

        builder.ledger.flush()
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Customer order placed",
            order_id=str(order.id),
            customer_id=str(customer.id),
            total=order.total.amount,
            currency=order.currency,
        )
        return str(order.id)
