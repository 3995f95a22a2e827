import os
from pathlib import Path

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
    """Select the config environment before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain
    from storefront.inventory.ledger import reset_ledger

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_ledger()


# ---------------------------------------------------------------------------
# Shared factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def ledger():
    from storefront.inventory.ledger import get_ledger

    return get_ledger()


@pytest.fixture()
def stock_product(ledger):
    """Register a product in the catalogue: ``stock_product("P1", 10, "10.00")``."""

    def _register(product_id, available, unit_price="10.00", name=None):
        return ledger.register(product_id, name or f"Product {product_id}", unit_price, available)

    return _register


@pytest.fixture()
def customer():
    """A registered customer with a contact profile."""
    from protean import current_domain
    from storefront.customer.registration import RegisterCustomer

    customer_id = "cust-001"
    current_domain.process(
        RegisterCustomer(
            customer_id=customer_id,
            name="Ada Lovelace",
            email="ada@example.com",
            phone="555-0100",
            address="12 St James's Square, London",
        ),
        asynchronous=False,
    )
    return customer_id


@pytest.fixture()
def add_to_cart():
    from protean import current_domain
    from storefront.cart.items import AddToCart

    def _add(customer_id, product_id, quantity):
        return current_domain.process(
            AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add
