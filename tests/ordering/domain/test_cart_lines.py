"""Tests for Cart line-item semantics."""

import pytest
from protean.exceptions import ValidationError

from stallionwear.cart.cart import Cart
from stallionwear.cart.events import CartCleared, CartItemAdded, CartQuantityUpdated
from stallionwear.errors import ItemNotFound


def _make_cart():
    return Cart.create(user_id="user-001")


class TestAddItem:
    def test_same_key_merges_into_one_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 2)
        cart.add_item("prod-001", "L", "Red", 22.0, 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_merge_overwrites_price_with_latest(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)
        cart.add_item("prod-001", "L", "Red", 24.0, 1)

        assert cart.items[0].price_at_time == 24.0

    def test_different_color_is_a_separate_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)
        cart.add_item("prod-001", "L", "Blue", 20.0, 1)

        assert len(cart.items) == 2

    @pytest.mark.parametrize("quantity", [0, -1, 100])
    def test_quantity_outside_range_is_rejected(self, quantity):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-001", "L", "Red", 22.0, quantity)
        assert cart.items == []

    def test_merge_past_maximum_is_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 98)

        with pytest.raises(ValidationError):
            cart.add_item("prod-001", "L", "Red", 22.0, 2)
        assert cart.items[0].quantity == 98

    def test_add_raises_event(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 2)

        event = cart._events[-1]
        assert isinstance(event, CartItemAdded)
        assert event.line_quantity == 2


class TestAdjustQuantity:
    def test_increment(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)
        cart.adjust_quantity("prod-001", "L", "Red", 1)

        assert cart.items[0].quantity == 2
        assert isinstance(cart._events[-1], CartQuantityUpdated)

    def test_decrement_at_one_is_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)

        with pytest.raises(ValidationError):
            cart.adjust_quantity("prod-001", "L", "Red", -1)
        assert cart.items[0].quantity == 1

    def test_increment_past_maximum_is_rejected(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 99)

        with pytest.raises(ValidationError):
            cart.adjust_quantity("prod-001", "L", "Red", 1)

    def test_unknown_line(self):
        cart = _make_cart()
        with pytest.raises(ItemNotFound):
            cart.adjust_quantity("prod-001", "L", "Red", 1)


class TestRemoveAndClear:
    def test_remove_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)
        cart.remove_item("prod-001", "L", "Red")

        assert cart.items == []

    def test_remove_unknown_line(self):
        cart = _make_cart()
        with pytest.raises(ItemNotFound):
            cart.remove_item("prod-001", "L", "Red")

    def test_clear_empties_every_line(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 1)
        cart.add_item("prod-002", "M", "Blue", 20.0, 2)

        cart.clear()

        assert cart.items == []
        assert isinstance(cart._events[-1], CartCleared)
        assert cart._events[-1].items_removed == 2


class TestTotals:
    def test_total_uses_snapshot_prices(self):
        cart = _make_cart()
        cart.add_item("prod-001", "L", "Red", 22.0, 3)
        cart.add_item("prod-002", "M", "Blue", 20.0, 1)

        assert cart.total() == 86.0
        assert cart.item_count == 4
