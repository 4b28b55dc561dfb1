import pytest
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeStripeGateway


@pytest.fixture(autouse=True)
def gateway():
    fake = FakeStripeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed, payments_bed, reset_domains):
    from ordering.domain import ordering
    from payments.domain import payments

    with payments_bed.domain_context():
        yield
    reset_domains(payments, ordering)
