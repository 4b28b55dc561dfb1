import os
from pathlib import Path
from uuid import uuid4

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the config overlay each domain picks up when it is initialized.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("PAYMENT_GATEWAY", "fake")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


def _reset(domain):
    with domain.domain_context():
        for _, provider in domain.providers.items():
            provider._data_reset()
        domain.event_store.store._data_reset()


@pytest.fixture()
def reset_domains():
    """Return a callable that clears providers and event stores of the given domains."""

    def _clear(*domains):
        for domain in domains:
            _reset(domain)

    return _clear


# ---------------------------------------------------------------------------
# Ordering factories, usable from any domain context
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_product(ordering_bed):
    """Return a callable that adds a product and returns its id."""
    from ordering.domain import ordering
    from ordering.product.creation import AddProduct

    def _add(**overrides):
        defaults = {
            "name": "Trail Running Shoe",
            "sku": f"SKU-{uuid4().hex[:8]}",
            "price": "100.00",
            "currency": "USD",
            "stock": 10,
        }
        defaults.update(overrides)
        with ordering.domain_context():
            return ordering.process(AddProduct(**defaults), asynchronous=False)

    return _add


@pytest.fixture()
def place_guest_order(ordering_bed, add_product):
    """Return a callable that places a guest order and returns the Order."""
    from ordering.domain import ordering
    from ordering.order.draft import GuestCustomerData, OrderDraft, OrderItemDraft
    from ordering.order.service import OrderService
    from ordering.shared.money import Money

    def _place(product_id=None, quantity=2, email="guest@example.com", tax="8.00", shipping="5.00", discount="3.00"):
        with ordering.domain_context():
            draft = OrderDraft(
                items=(OrderItemDraft(product_id or add_product(), quantity),),
                tax_amount=Money.of(tax, "USD"),
                shipping_amount=Money.of(shipping, "USD"),
                discount_amount=Money.of(discount, "USD"),
            )
            guest = GuestCustomerData.of(email, "Jamie", "Rivera")
            return OrderService().create_guest_order(draft, guest)

    return _place
