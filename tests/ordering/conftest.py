import pytest


@pytest.fixture(autouse=True)
def _ctx(ordering_bed, reset_domains):
    from ordering.domain import ordering

    with ordering_bed.domain_context():
        yield
    reset_domains(ordering)
