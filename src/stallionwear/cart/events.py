"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from stallionwear.domain import stallionwear


@stallionwear.event(part_of="Cart")
class CartItemAdded:
    """A variant was added to a cart, or merged into an existing line."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    price_at_time = Float(required=True)


@stallionwear.event(part_of="Cart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@stallionwear.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)


@stallionwear.event(part_of="Cart")
class CartCleared:
    """Every line was removed from a cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items_removed = Integer(required=True)
