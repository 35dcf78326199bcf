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
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    bed = DomainFixture(marketplace)
    bed.setup()
    setup_db(marketplace)
    yield bed
    drop_db(marketplace)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture
def shipping_address():
    return {
        "county": "Nairobi",
        "sub_county": "Westlands",
        "ward": "Parklands",
        "specific_location": "3rd Parklands Avenue, Gate 12",
        "contact_phone": "0712345678",
    }


@pytest.fixture
def listed_product():
    """Factory: list a product as ``farmer_id`` and approve it."""
    from marketplace.catalogue import service as catalogue

    def _list(farmer_id="farmer-001", price=80.0, quantity=10, approve=True, **overrides):
        fields = {
            "name": "Sukuma Wiki",
            "description": "Fresh collard greens from Limuru.",
            "category": "vegetables",
            "subcategory": "leafy greens",
            "unit": "bunch",
        }
        fields.update(overrides)
        product = catalogue.list_product(farmer_id=farmer_id, price=price, quantity=quantity, **fields)
        if approve:
            product = catalogue.moderate_listing(product.id, "admin-001", "approve")
        return product

    return _list


@pytest.fixture
def placed_order(shipping_address):
    """Factory: place an order for ``[(product, quantity), ...]``."""
    from marketplace.ordering import service as ordering

    def _place(buyer_id, lines, payment_method="mpesa"):
        return ordering.create_order(
            buyer_id=buyer_id,
            items=[{"product_id": str(product.id), "quantity": quantity} for product, quantity in lines],
            payment_method=payment_method,
            shipping_address=shipping_address,
        )

    return _place


@pytest.fixture
def delivered_order(placed_order):
    """Factory: place an order and walk it through to delivered."""
    from marketplace.ordering import service as ordering

    def _deliver(buyer_id, product, quantity=1):
        order = placed_order(buyer_id, [(product, quantity)])
        farmer_id = str(product.farmer_id)
        for status in ("confirmed", "processing", "shipped"):
            ordering.update_order_status(order.id, farmer_id, status)
        return ordering.update_order_status(order.id, buyer_id, "delivered")

    return _deliver
