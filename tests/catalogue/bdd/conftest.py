"""Shared BDD fixtures and step definitions for the catalogue."""

import pytest
from pytest_bdd import given, parsers, then

from stallionwear.product.product import Product


@pytest.fixture()
def error():
    """Container for the exception raised by the last When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse(
        'a product priced {price:f} with {units_a:d} units of "{size_a}" "{color_a}" at +{modifier_a:f} '
        'and {units_b:d} units of "{size_b}" "{color_b}" at +{modifier_b:f}'
    ),
    target_fixture="product",
)
def product_with_variants(price, units_a, size_a, color_a, modifier_a, units_b, size_b, color_b, modifier_b):
    variants = [
        {"size": size_a, "color": color_a, "quantity": units_a, "price_modifier": modifier_a},
        {"size": size_b, "color": color_b, "quantity": units_b, "price_modifier": modifier_b},
    ]
    return Product.create(
        name="Classic Tee",
        description="A heavyweight cotton tee with a relaxed fit.",
        price=price,
        category="Shirts",
        brand="Stallion",
        created_by="admin-001",
        variants=variants,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the action fails with "{error_name}"'))
def action_fails(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then(parsers.cfparse('"{size}" "{color}" has {units:d} units in stock'))
def variant_has_units(product, size, color, units):
    assert product.get_variant(size, color).quantity == units
