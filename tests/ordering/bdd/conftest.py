"""Shared BDD fixtures and step definitions for the Ordering domain."""

from ordering.customer.customer import Customer
from ordering.customer.registration import RegisterCustomer
from ordering.product.stock import get_product
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a product "{name}" priced {price} {currency} with {stock:d} units in stock'),
    target_fixture="product_id",
)
def _product(add_product, name, price, currency, stock):
    return add_product(name=name, price=price, currency=currency, stock=stock)


@given(parsers.cfparse('a guest "{email}" ordered {quantity:d} unit'), target_fixture="order")
def _guest_order(place_guest_order, product_id, email, quantity):
    return place_guest_order(product_id, quantity, email, tax="0", shipping="0", discount="0")


@given(parsers.cfparse('a registered customer "{email}"'), target_fixture="customer")
def _customer(email):
    command = RegisterCustomer(email=email, first_name="Jamie", last_name="Rivera")
    customer_id = current_domain.process(command, asynchronous=False)
    return current_domain.repository_for(Customer).get(customer_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the product has {stock:d} units in stock"))
def _stock(product_id, stock):
    assert get_product(product_id).stock == stock
