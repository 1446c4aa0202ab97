"""Wishlist management — commands, handler and the wishlist read model."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from stallionwear.cart.cart import Cart
from stallionwear.cart.items import priced_variant
from stallionwear.config import AMOUNT_EPSILON, MAX_CART_QUANTITY
from stallionwear.domain import stallionwear
from stallionwear.errors import ItemNotFound, ProductNotFound
from stallionwear.product.inventory import InventoryService
from stallionwear.wishlist.wishlist import Wishlist

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Wishlist")
class AddToWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)


@stallionwear.command(part_of="Wishlist")
class RemoveFromWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)


@stallionwear.command(part_of="Wishlist")
class ClearWishlist:
    user_id = Identifier(required=True)


@stallionwear.command(part_of="Wishlist")
class MoveWishlistItemToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)
    quantity = Integer(default=1)


@stallionwear.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        _, price = priced_variant(InventoryService(), command.product_id, command.size, command.color)

        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_user(command.user_id)
        wishlist.add_item(command.product_id, command.size, command.color, price)
        repo.add(wishlist)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_user(command.user_id)
        wishlist.remove_item(command.product_id, command.size, command.color)
        repo.add(wishlist)

    @handle(ClearWishlist)
    def clear_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_user(command.user_id)
        wishlist.clear()
        repo.add(wishlist)

    @handle(MoveWishlistItemToCart)
    def move_to_cart(self, command):
        if command.quantity is None or not 1 <= command.quantity <= MAX_CART_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {MAX_CART_QUANTITY}"]})

        wishlist_repo = current_domain.repository_for(Wishlist)
        wishlist = wishlist_repo.for_user(command.user_id)
        if wishlist.find_item(command.product_id, command.size, command.color) is None:
            raise ItemNotFound({"item": ["Item not found in wishlist"]})

        inventory = InventoryService()
        product, price = priced_variant(inventory, command.product_id, command.size, command.color)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        existing = cart.find_item(command.product_id, command.size, command.color)
        requested = command.quantity + (existing.quantity if existing else 0)
        inventory.ensure_in_stock(product, command.size, command.color, requested)

        cart.add_item(command.product_id, command.size, command.color, price, command.quantity)
        wishlist.remove_item(command.product_id, command.size, command.color)

        cart_repo.add(cart)
        wishlist_repo.add(wishlist)


def wishlist_summary(user_id) -> dict:
    """Saved lines with their snapshot price next to the current price.

    Lines whose product has since been deleted are listed as unavailable.
    """
    wishlist = current_domain.repository_for(Wishlist).find_for_user(user_id)
    if wishlist is None:
        return {"items": [], "item_count": 0, "estimated_value": 0.0}

    inventory = InventoryService()
    lines = []
    for item in sorted(wishlist.items, key=lambda i: i.added_at):
        line = {
            "product_id": str(item.product_id),
            "size": item.size,
            "color": item.color,
            "price_at_time": item.price_at_time,
            "added_at": item.added_at,
        }
        try:
            product = inventory.load(item.product_id)
        except ProductNotFound:
            logger.info("wishlist_product_unavailable", user_id=str(user_id), product_id=str(item.product_id))
            line.update(available=False, in_stock=False, current_price=None, price_changed=False)
        else:
            current_price = product.final_price(item.size, item.color)
            line.update(
                name=product.name,
                available=True,
                in_stock=product.is_in_stock(item.size, item.color),
                current_price=current_price,
                price_changed=abs(current_price - item.price_at_time) > AMOUNT_EPSILON,
            )
        lines.append(line)

    return {
        "items": lines,
        "item_count": len(lines),
        "estimated_value": wishlist.estimated_value(),
    }
