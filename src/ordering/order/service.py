"""Order service: the in-process API for placing and converting orders.

Each call dispatches a command, so it runs in its own unit of work, and then
reloads the persisted aggregate for the caller.
"""

import json

from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.order.conversion import ClaimGuestOrder, ConvertGuestOrder, load_order
from ordering.order.draft import GuestCustomerData, OrderDraft
from ordering.order.order import Order
from ordering.order.placement import PlaceCustomerOrder, PlaceGuestOrder


class OrderService:
    def create_guest_order(self, draft: OrderDraft, guest: GuestCustomerData) -> Order:
        command = PlaceGuestOrder(
            draft=json.dumps(draft.to_payload(), default=str),
            guest=json.dumps(guest.to_payload()),
        )
        order_id = current_domain.process(command, asynchronous=False)
        return load_order(order_id)

    def create_user_order(self, customer: Customer, draft: OrderDraft) -> Order:
        command = PlaceCustomerOrder(
            customer_id=str(customer.id),
            draft=json.dumps(draft.to_payload(), default=str),
        )
        order_id = current_domain.process(command, asynchronous=False)
        return load_order(order_id)

    def convert_guest_order_to_user(self, order: Order, customer: Customer) -> Order:
        command = ConvertGuestOrder(order_id=str(order.id), customer_id=str(customer.id))
        current_domain.process(command, asynchronous=False)
        return load_order(order.id)

    def claim_guest_order(self, order: Order, phone: str | None = None) -> tuple[Order, Customer]:
        """Attach a guest order to the account owning its email, creating one if needed."""
        command = ClaimGuestOrder(order_id=str(order.id), phone=phone)
        customer_id = current_domain.process(command, asynchronous=False)
        return load_order(order.id), current_domain.repository_for(Customer).get(customer_id)
