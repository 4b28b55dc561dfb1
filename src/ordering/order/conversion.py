"""Guest order conversion: attach a guest order to a customer account.

``ConvertGuestOrder`` hands the order to an existing customer.
``ClaimGuestOrder`` finds the customer by the guest email address, or
registers one from the guest contact details, before converting.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.customer.registration import register
from ordering.domain import logger, ordering
from ordering.errors import InvalidOrderData, OrderNotFound
from ordering.order.order import Order
from ordering.order.placement import load_customer


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError as exc:
        raise OrderNotFound(order_id) from exc


@ordering.command(part_of="Order")
class ConvertGuestOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@ordering.command(part_of="Order")
class ClaimGuestOrder:
    order_id = Identifier(required=True)
    phone = String(max_length=20)


@ordering.command_handler(part_of=Order)
class GuestOrderConversionHandler:
    @handle(ConvertGuestOrder)
    def convert_guest_order(self, command):
        order = load_order(command.order_id)
        customer = load_customer(command.customer_id)

        order.convert_to_customer(customer)
        current_domain.repository_for(Order).add(order)

        logger.info("Guest order converted", order_id=str(order.id), customer_id=str(customer.id))
        return str(order.id)

    @handle(ClaimGuestOrder)
    def claim_guest_order(self, command):
        order = load_order(command.order_id)
        if order.customer_id:
            raise InvalidOrderData("Order is already associated with a user account")
        if order.guest_email is None or order.guest_name is None:
            raise InvalidOrderData("Guest order does not have enough contact details to create an account")

        customer = current_domain.repository_for(Customer).find_by_email(order.guest_email.address)
        if customer is None:
            customer = register(
                email=order.guest_email.address,
                first_name=order.guest_name.first_name,
                last_name=order.guest_name.last_name,
                phone=command.phone or (order.guest_phone.number if order.guest_phone else None),
            )

        order.convert_to_customer(customer)
        current_domain.repository_for(Order).add(order)

        logger.info("Guest order claimed", order_id=str(order.id), customer_id=str(customer.id))
        return str(customer.id)
