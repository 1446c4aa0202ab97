"""Domain events for the Wishlist aggregate."""

from protean.fields import Float, Identifier, Integer, String

from stallionwear.domain import stallionwear


@stallionwear.event(part_of="Wishlist")
class WishlistItemAdded:
    """A variant was saved to a wishlist, or an existing line was refreshed."""

    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    price_at_time = Float(required=True)


@stallionwear.event(part_of="Wishlist")
class WishlistItemRemoved:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)


@stallionwear.event(part_of="Wishlist")
class WishlistCleared:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items_removed = Integer(required=True)
