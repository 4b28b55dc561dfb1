"""Shared BDD fixtures and step definitions for the Payments domain."""

import pytest
from payments.payment.payment import Payment
from payments.payment.service import PaymentService
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def intent_event():
    """Return a callable that builds a gateway event carrying a payment intent."""

    def _event(event_type, intent_id, status=None, **fields):
        intent = {"id": intent_id, "object": "payment_intent", "status": status, **fields}
        return {"id": f"evt_{intent_id}", "type": event_type, "data": {"object": intent}}

    return _event


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a guest order totalling {amount} {currency}"), target_fixture="order")
def _order(add_product, place_guest_order, amount, currency):
    product_id = add_product(price=amount, currency=currency)
    return place_guest_order(product_id, quantity=1, tax="0", shipping="0", discount="0")


@given("a payment intent has been opened for the order", target_fixture="payment")
def _payment(order):
    return PaymentService().create_payment_intent(order)


@given(parsers.cfparse('the gateway reported "{event_type}" with status "{status}"'))
def _reported(intent_event, payment, event_type, status):
    PaymentService().handle_webhook_event(intent_event(event_type, payment.stripe_payment_intent_id, status))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the payment status is "{status}"'))
def _status(payment, status):
    assert current_domain.repository_for(Payment).get(payment.id).status == status
