"""Shared BDD fixtures and step definitions for ordering scenarios."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from stallionwear.order.creation import place_order
from stallionwear.order.order import Order
from stallionwear.order.status import update_order_status
from stallionwear.product.product import Product


@pytest.fixture()
def context():
    """Outcome of the last When step: the order it touched and any error."""
    return {"order_id": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse(
        'a product priced {price:f} with {units:d} units of "{size}" "{color}" and a price modifier of {modifier:f}'
    ),
    target_fixture="product",
)
def _(make_product, price, units, size, color, modifier):
    return make_product(
        price=price,
        variants=[{"size": size, "color": color, "quantity": units, "price_modifier": modifier}],
    )


@given(parsers.cfparse('the customer has ordered {qty:d} of "{size}" "{color}"'))
def _(context, customer, product, shipping_address, qty, size, color):
    order = place_order(
        customer,
        items=[{"product_id": product, "size": size, "color": color, "quantity": qty}],
        shipping_address=shipping_address,
        payment_method="CashOnDelivery",
    )
    context["order_id"] = order.id


@given(parsers.cfparse('an admin moved the order to "{status}"'))
def _(context, admin, status):
    update_order_status(admin, context["order_id"], order_status=status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{error_name}"'))
def _(context, error_name):
    assert context["error"] is not None
    assert type(context["error"]).__name__ == error_name


@then(parsers.cfparse('the order status is "{status}"'))
def _(context, status):
    order = current_domain.repository_for(Order).get(context["order_id"])
    assert order.order_status == status


@then(parsers.cfparse('"{size}" "{color}" has {units:d} units in stock'))
def _(product, size, color, units):
    stored = current_domain.repository_for(Product).get(product)
    assert stored.get_variant(size, color).quantity == units
