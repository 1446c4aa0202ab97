"""Cart aggregate — one per user, lines keyed by (product, size, color).

A line's ``price_at_time`` is a snapshot taken when the line was last added
to; it is not re-derived from the product on read.
"""

from datetime import UTC, datetime

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from stallionwear.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from stallionwear.config import MAX_CART_QUANTITY
from stallionwear.domain import stallionwear
from stallionwear.errors import ItemNotFound


@stallionwear.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1, max_value=MAX_CART_QUANTITY)
    price_at_time = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def subtotal(self):
        return self.price_at_time * self.quantity


@stallionwear.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def find_item(self, product_id, size, color):
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and i.size == size and i.color == color
            ),
            None,
        )

    def _require_item(self, product_id, size, color):
        item = self.find_item(product_id, size, color)
        if item is None:
            raise ItemNotFound({"item": ["Item not found in cart"]})
        return item

    def add_item(self, product_id, size, color, price, quantity=1):
        """Add a line, or merge into the existing line for the same key.

        Merging adds the quantity and overwrites the price with ``price``.
        """
        if quantity is None or not 1 <= quantity <= MAX_CART_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {MAX_CART_QUANTITY}"]})

        now = datetime.now(UTC)
        existing = self.find_item(product_id, size, color)

        if existing:
            merged = existing.quantity + quantity
            if merged > MAX_CART_QUANTITY:
                raise ValidationError({"quantity": [f"Cannot have more than {MAX_CART_QUANTITY} of one item in cart"]})
            existing.quantity = merged
            existing.price_at_time = price
            existing.added_at = now
            line_quantity = merged
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    size=size,
                    color=color,
                    quantity=quantity,
                    price_at_time=price,
                    added_at=now,
                )
            )
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                size=size,
                color=color,
                quantity=quantity,
                line_quantity=line_quantity,
                price_at_time=price,
            )
        )

    def remove_item(self, product_id, size, color):
        item = self._require_item(product_id, size, color)

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                size=size,
                color=color,
            )
        )

    def adjust_quantity(self, product_id, size, color, delta):
        """Change a line's quantity by ``delta``.

        A line cannot be decremented to zero; it has to be removed instead.
        Stock is checked by the caller, which has access to the product.
        """
        item = self._require_item(product_id, size, color)

        previous = item.quantity
        new_quantity = previous + delta
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity cannot be less than 1. Remove the item instead."]})
        if new_quantity > MAX_CART_QUANTITY:
            raise ValidationError({"quantity": [f"Cannot have more than {MAX_CART_QUANTITY} of one item in cart"]})

        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                size=size,
                color=color,
                previous_quantity=previous,
                new_quantity=new_quantity,
            )
        )
        return item

    def clear(self):
        removed = len(self.items)
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), items_removed=removed))

    def total(self):
        return sum(item.subtotal for item in self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)
