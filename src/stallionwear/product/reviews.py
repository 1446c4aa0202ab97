"""Product reviews — commands, handler and review read models.

Only buyers may review: the reviewer must own a delivered order that
contains the product.
"""

from collections import Counter

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.errors import AccessDenied, ItemNotFound, OrderNotFound, ProductNotFound
from stallionwear.identity import Principal, Role
from stallionwear.order.cancellation import load_order
from stallionwear.order.order import Order, OrderStatus
from stallionwear.product.inventory import InventoryService, stock_locks
from stallionwear.product.product import Product


@stallionwear.command(part_of="Product")
class AddReview:
    actor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)


@stallionwear.command(part_of="Product")
class DeleteReview:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)
    review_id = Identifier(required=True)


@stallionwear.command_handler(part_of=Product)
class ReviewHandler:
    @handle(AddReview)
    def add_review(self, command):
        inventory = InventoryService()
        product = inventory.load(command.product_id)

        order = load_order(command.order_id, Principal.user(command.actor_id))
        if order.status != OrderStatus.DELIVERED or not order.is_delivered:
            raise OrderNotFound({"order": ["Order not found or not eligible for review"]})
        if not any(str(item.product_id) == str(product.id) for item in order.items):
            raise ValidationError({"product_id": ["Product was not purchased in this order"]})

        review = product.add_review(command.actor_id, command.rating, command.comment)
        inventory.save_all()
        return str(review.id)

    @handle(DeleteReview)
    def delete_review(self, command):
        inventory = InventoryService()
        product = inventory.load(command.product_id)

        review = next((r for r in product.reviews if str(r.id) == str(command.review_id)), None)
        if review is None:
            raise ItemNotFound({"review": ["Review not found"]})

        principal = Principal(id=str(command.actor_id), role=Role(command.actor_role))
        if not principal.owns(review.user_id):
            raise AccessDenied({"review": ["You can only delete your own reviews"]})

        product.delete_review(command.review_id)
        inventory.save_all()


def add_review(principal: Principal, product_id, order_id, rating, comment) -> str:
    """Review a product bought in one of the principal's delivered orders.

    Returns the new review id.
    """
    with stock_locks.hold([product_id]):
        return current_domain.process(
            AddReview(actor_id=principal.id, product_id=product_id, order_id=order_id, rating=rating, comment=comment),
            asynchronous=False,
        )


def delete_review(principal: Principal, product_id, review_id) -> None:
    with stock_locks.hold([product_id]):
        current_domain.process(
            DeleteReview(
                actor_id=principal.id,
                actor_role=principal.role.value,
                product_id=product_id,
                review_id=review_id,
            ),
            asynchronous=False,
        )


def product_reviews(product_id, rating=None) -> dict:
    """Reviews of a product, newest first, with the rating distribution."""
    product = InventoryService().load(product_id)

    reviews = [r for r in product.reviews if rating is None or r.rating == rating]
    reviews.sort(key=lambda r: r.created_at, reverse=True)
    distribution = Counter(r.rating for r in product.reviews)

    return {
        "product_id": str(product.id),
        "name": product.name,
        "average_rating": product.average_rating,
        "total_reviews": len(product.reviews),
        "distribution": {stars: distribution.get(stars, 0) for stars in range(1, 6)},
        "reviews": [
            {
                "id": str(r.id),
                "user_id": str(r.user_id),
                "rating": r.rating,
                "comment": r.comment,
                "created_at": r.created_at,
            }
            for r in reviews
        ],
    }


def reviewable_products(principal: Principal) -> list[dict]:
    """Items of the principal's delivered orders that they have not reviewed yet.

    Most recently delivered orders come first.
    """
    orders = current_domain.repository_for(Order).delivered_for_user(principal.id)
    orders.sort(key=lambda o: o.delivered_at, reverse=True)

    inventory = InventoryService()
    reviewable = []
    seen = set()
    for order in orders:
        for item in order.items:
            if str(item.product_id) in seen:
                continue
            try:
                product = inventory.load(item.product_id)
            except ProductNotFound:
                continue
            if product.review_by(principal.id) is not None:
                continue

            seen.add(str(product.id))

            reviewable.append(
                {
                    "order_id": str(order.id),
                    "delivered_at": order.delivered_at,
                    "product_id": str(product.id),
                    "name": product.name,
                    "product_name": item.product_name,
                    "size": item.size,
                    "color": item.color,
                    "quantity": item.quantity,
                    "price": item.price,
                }
            )
    return reviewable
