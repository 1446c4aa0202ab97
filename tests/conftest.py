import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


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


@pytest.fixture(scope="session")
def _stallionwear_domain(request):
    """Initialize the domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from stallionwear.domain import stallionwear

    stallionwear.init()
    return stallionwear


@pytest.fixture(autouse=True)
def run_around_tests(_stallionwear_domain):
    """Push domain context before each test, cleanup after."""
    from stallionwear.media import reset_media_store

    ctx = _stallionwear_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_media_store()


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------
@pytest.fixture()
def admin():
    from stallionwear.identity import Principal

    return Principal.admin("admin-001")


@pytest.fixture()
def customer():
    from stallionwear.identity import Principal

    return Principal.user("user-001")


@pytest.fixture()
def other_customer():
    from stallionwear.identity import Principal

    return Principal.user("user-002")


# ---------------------------------------------------------------------------
# Catalogue data
# ---------------------------------------------------------------------------
@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Jordan Rivera",
        "address": "221 Market Street",
        "city": "Springfield",
        "postal_code": "62701",
        "country": "US",
        "phone": "555-0100",
    }


@pytest.fixture()
def make_product():
    """Persist a product and return its id.

    Defaults to the "Classic Tee" at 20.0 with an (L, Red) variant of 5 units
    priced +2 and an (M, Blue) variant of 10 units at the base price.
    """
    from protean import current_domain

    from stallionwear.product.product import Product

    def _make(**overrides):
        data = {
            "name": "Classic Tee",
            "description": "A heavyweight cotton tee with a relaxed fit.",
            "price": 20.0,
            "category": "Shirts",
            "brand": "Stallion",
            "created_by": "admin-001",
            "variants": [
                {"size": "L", "color": "Red", "quantity": 5, "price_modifier": 2.0},
                {"size": "M", "color": "Blue", "quantity": 10, "price_modifier": 0.0},
            ],
        }
        data.update(overrides)
        product = Product.create(**data)
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    return _make


@pytest.fixture()
def product_id(make_product):
    return make_product()
