"""Wishlist aggregate — saved variants without quantities, one list per user."""

from datetime import UTC, datetime

from protean import atomic_change
from protean.fields import DateTime, Float, HasMany, Identifier, String

from stallionwear.domain import stallionwear
from stallionwear.errors import ItemNotFound
from stallionwear.wishlist.events import (
    WishlistCleared,
    WishlistItemAdded,
    WishlistItemRemoved,
)


@stallionwear.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)
    price_at_time = Float(required=True, min_value=0.0)
    added_at = DateTime()


@stallionwear.aggregate
class Wishlist:
    user_id = Identifier(required=True)
    items = HasMany(WishlistItem)
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

    def add_item(self, product_id, size, color, price):
        """Save a variant. An existing line gets its price and timestamp refreshed."""
        now = datetime.now(UTC)
        existing = self.find_item(product_id, size, color)

        if existing:
            existing.price_at_time = price
            existing.added_at = now
        else:
            self.add_items(
                WishlistItem(
                    product_id=product_id,
                    size=size,
                    color=color,
                    price_at_time=price,
                    added_at=now,
                )
            )

        self.updated_at = now

        self.raise_(
            WishlistItemAdded(
                wishlist_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                size=size,
                color=color,
                price_at_time=price,
            )
        )

    def remove_item(self, product_id, size, color):
        item = self.find_item(product_id, size, color)
        if item is None:
            raise ItemNotFound({"item": ["Item not found in wishlist"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistItemRemoved(
                wishlist_id=str(self.id),
                product_id=str(product_id),
                size=size,
                color=color,
            )
        )

    def clear(self):
        removed = len(self.items)
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(WishlistCleared(wishlist_id=str(self.id), user_id=str(self.user_id), items_removed=removed))

    def estimated_value(self):
        return sum(item.price_at_time for item in self.items)
