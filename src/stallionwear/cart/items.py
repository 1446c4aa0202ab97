"""Cart line management — commands and handler.

Every command is scoped to one user's cart, which is created on first use.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from stallionwear.cart.cart import Cart
from stallionwear.config import AMOUNT_EPSILON
from stallionwear.domain import stallionwear
from stallionwear.errors import PriceMismatch, VariantNotFound
from stallionwear.product.inventory import InventoryService


@stallionwear.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)
    quantity = Integer(default=1)
    price = Float()  # Price the client displayed; checked against the current price


@stallionwear.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)


@stallionwear.command(part_of="Cart")
class IncrementCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)


@stallionwear.command(part_of="Cart")
class DecrementCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)


@stallionwear.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def priced_variant(inventory, product_id, size, color, expected_price=None):
    """Load a product and return it with the current final price of a variant.

    Raises ``VariantNotFound`` when the variant does not exist and
    ``PriceMismatch`` when ``expected_price`` is off by more than a cent.
    """
    product = inventory.load(product_id)
    if product.get_variant(size, color) is None:
        raise VariantNotFound({"variant": [f"Variant ({size}, {color}) not found for {product.name}"]})

    price = product.final_price(size, color)
    if expected_price is not None and abs(expected_price - price) > AMOUNT_EPSILON:
        raise PriceMismatch({"price": [f"Price has changed. Current price is {price:.2f}"]})
    return product, price


@stallionwear.command_handler(part_of=Cart)
class CartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        inventory = InventoryService()
        product, price = priced_variant(
            inventory, command.product_id, command.size, command.color, expected_price=command.price
        )

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)

        existing = cart.find_item(command.product_id, command.size, command.color)
        requested = command.quantity + (existing.quantity if existing else 0)
        inventory.ensure_in_stock(product, command.size, command.color, requested)

        cart.add_item(command.product_id, command.size, command.color, price, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        cart.remove_item(command.product_id, command.size, command.color)
        repo.add(cart)

    @handle(IncrementCartItem)
    def increment_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        line = cart.find_item(command.product_id, command.size, command.color)

        if line is not None:
            inventory = InventoryService()
            product = inventory.load(command.product_id)
            inventory.ensure_in_stock(product, command.size, command.color, line.quantity + 1)

        cart.adjust_quantity(command.product_id, command.size, command.color, 1)
        repo.add(cart)

    @handle(DecrementCartItem)
    def decrement_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        cart.adjust_quantity(command.product_id, command.size, command.color, -1)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        cart.clear()
        repo.add(cart)


def cart_summary(user_id) -> dict:
    """Current lines of a user's cart with their snapshot prices and totals."""
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    if cart is None:
        return {"items": [], "total": 0.0, "item_count": 0}

    return {
        "items": [
            {
                "product_id": str(item.product_id),
                "size": item.size,
                "color": item.color,
                "quantity": item.quantity,
                "price_at_time": item.price_at_time,
                "subtotal": item.subtotal,
                "added_at": item.added_at,
            }
            for item in sorted(cart.items, key=lambda i: i.added_at)
        ],
        "total": cart.total(),
        "item_count": cart.item_count,
    }
