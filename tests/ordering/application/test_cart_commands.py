"""Application tests for cart commands."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from stallionwear.cart.items import (
    AddToCart,
    ClearCart,
    DecrementCartItem,
    IncrementCartItem,
    RemoveFromCart,
    cart_summary,
)
from stallionwear.errors import (
    InsufficientStock,
    ItemNotFound,
    PriceMismatch,
    ProductNotFound,
    VariantNotFound,
)


def _add(user_id, product_id, size="L", color="Red", **overrides):
    current_domain.process(
        AddToCart(user_id=user_id, product_id=product_id, size=size, color=color, **overrides),
        asynchronous=False,
    )


def _line(user_id, product_id, size="L", color="Red"):
    return {"user_id": user_id, "product_id": product_id, "size": size, "color": color}


class TestAddToCart:
    def test_first_add_creates_the_cart(self, customer, product_id):
        _add(customer.id, product_id, quantity=2)

        summary = cart_summary(customer.id)
        assert summary["item_count"] == 2
        assert summary["items"][0]["price_at_time"] == 22.0
        assert summary["total"] == 44.0

    def test_adds_merge_into_one_line(self, customer, product_id):
        _add(customer.id, product_id, quantity=2)
        _add(customer.id, product_id, quantity=3)

        summary = cart_summary(customer.id)
        assert len(summary["items"]) == 1
        assert summary["items"][0]["quantity"] == 5

    def test_merged_quantity_is_checked_against_stock(self, customer, product_id):
        _add(customer.id, product_id, quantity=3)

        with pytest.raises(InsufficientStock):
            _add(customer.id, product_id, quantity=3)
        assert cart_summary(customer.id)["items"][0]["quantity"] == 3

    def test_matching_expected_price_is_accepted(self, customer, product_id):
        _add(customer.id, product_id, price=22.004)
        assert cart_summary(customer.id)["items"][0]["price_at_time"] == 22.0

    def test_stale_expected_price_is_rejected(self, customer, product_id):
        with pytest.raises(PriceMismatch):
            _add(customer.id, product_id, price=20.0)

    def test_unknown_product(self, customer):
        with pytest.raises(ProductNotFound):
            _add(customer.id, "missing")

    def test_unknown_variant(self, customer, product_id):
        with pytest.raises(VariantNotFound):
            _add(customer.id, product_id, size="XL")

    def test_quantity_above_limit(self, customer, make_product):
        product_id = make_product(variants=[{"size": "L", "color": "Red", "quantity": 500}])
        with pytest.raises(ValidationError):
            _add(customer.id, product_id, quantity=100)

    def test_carts_are_per_user(self, customer, other_customer, product_id):
        _add(customer.id, product_id)

        assert cart_summary(other_customer.id)["items"] == []


class TestAdjustCartLines:
    def test_increment_and_decrement(self, customer, product_id):
        _add(customer.id, product_id, quantity=2)

        current_domain.process(IncrementCartItem(**_line(customer.id, product_id)), asynchronous=False)
        assert cart_summary(customer.id)["items"][0]["quantity"] == 3

        current_domain.process(DecrementCartItem(**_line(customer.id, product_id)), asynchronous=False)
        assert cart_summary(customer.id)["items"][0]["quantity"] == 2

    def test_increment_past_stock_is_rejected(self, customer, product_id):
        _add(customer.id, product_id, quantity=5)

        with pytest.raises(InsufficientStock):
            current_domain.process(IncrementCartItem(**_line(customer.id, product_id)), asynchronous=False)

    def test_decrement_at_one_is_rejected(self, customer, product_id):
        _add(customer.id, product_id, quantity=1)

        with pytest.raises(ValidationError):
            current_domain.process(DecrementCartItem(**_line(customer.id, product_id)), asynchronous=False)

    def test_remove_line(self, customer, product_id):
        _add(customer.id, product_id, quantity=1)

        current_domain.process(RemoveFromCart(**_line(customer.id, product_id)), asynchronous=False)

        assert cart_summary(customer.id)["items"] == []

    def test_remove_missing_line(self, customer, product_id):
        with pytest.raises(ItemNotFound):
            current_domain.process(RemoveFromCart(**_line(customer.id, product_id)), asynchronous=False)

    def test_clear_cart(self, customer, product_id):
        _add(customer.id, product_id, quantity=1)
        _add(customer.id, product_id, size="M", color="Blue", quantity=4)

        current_domain.process(ClearCart(user_id=customer.id), asynchronous=False)

        summary = cart_summary(customer.id)
        assert summary["items"] == []
        assert summary["total"] == 0
