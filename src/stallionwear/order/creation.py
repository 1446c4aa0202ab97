"""Order placement — command, handler, and the locked placement flow.

Placing an order reads and writes three aggregates: the products being
bought, the new order, and the buyer's cart. The handler does all of it in
one unit of work, and ``place_order`` holds the stock lock of every product
in the request until that unit of work has committed.
"""

import json
from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from stallionwear.cart.cart import Cart
from stallionwear.domain import stallionwear
from stallionwear.identity import Principal
from stallionwear.order.order import ADDRESS_FIELDS, Order, PaymentMethod
from stallionwear.product.inventory import InventoryService, stock_locks

logger = structlog.get_logger(__name__)

ITEM_FIELDS = ("product_id", "size", "color", "quantity")


@stallionwear.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, size, color, quantity}
    shipping_address = Text(required=True)  # JSON: {full_name, address, city, postal_code, country, phone}
    payment_method = String(required=True, max_length=20)
    shipping_charge = Float(default=0.0)
    discount = Float(default=0.0)
    notes = Text()
    total_amount = Float()  # Optional client-side totals to verify
    final_amount = Float()


def _normalize_item(item):
    if isinstance(item, dict) and "product_id" not in item and "product" in item:
        item = {**item, "product_id": item["product"]}
    return item


def _validate_request(items, address, payment_method, shipping_charge, discount):
    if not items:
        raise ValidationError({"items": ["Order items are required"]})

    for item in items:
        if not isinstance(item, dict):
            raise ValidationError({"items": ["Each order item must be an object"]})
        if any(not item.get(field) for field in ITEM_FIELDS):
            raise ValidationError({"items": ["Each order item must have product, size, color, and quantity"]})
        quantity = item["quantity"]
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": ["Item quantity must be a positive integer"]})

    if not isinstance(address, dict) or any(not address.get(field) for field in ADDRESS_FIELDS):
        raise ValidationError({"shipping_address": ["Complete shipping address is required"]})

    if payment_method not in [m.value for m in PaymentMethod]:
        raise ValidationError({"payment_method": ["Valid payment method is required"]})

    if (shipping_charge or 0.0) < 0:
        raise ValidationError({"shipping_charge": ["Shipping charge cannot be negative"]})
    if (discount or 0.0) < 0:
        raise ValidationError({"discount": ["Discount cannot be negative"]})


@stallionwear.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = [_normalize_item(item) for item in json.loads(command.items)]
        address = json.loads(command.shipping_address)
        _validate_request(items, address, command.payment_method, command.shipping_charge, command.discount)

        # Price every line and check stock against the running total per variant
        inventory = InventoryService()
        requested = defaultdict(int)
        lines = []
        for item in items:
            product = inventory.load(item["product_id"])
            key = (str(product.id), item["size"], item["color"])
            requested[key] += item["quantity"]
            inventory.ensure_in_stock(product, item["size"], item["color"], requested[key])

            lines.append(
                {
                    "product_id": str(product.id),
                    "product_name": product.name,
                    "size": item["size"],
                    "color": item["color"],
                    "quantity": item["quantity"],
                    "price": product.final_price(item["size"], item["color"]),
                }
            )

        order = Order.place(
            user_id=command.user_id,
            items=lines,
            shipping_address=address,
            payment_method=command.payment_method,
            shipping_charge=command.shipping_charge,
            discount=command.discount,
            notes=command.notes,
            total_amount=command.total_amount,
            final_amount=command.final_amount,
        )
        current_domain.repository_for(Order).add(order)

        for line in lines:
            inventory.decrement(line["product_id"], line["size"], line["color"], line["quantity"])
        inventory.save_all()

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.find_for_user(command.user_id)
        if cart is not None and cart.items:
            cart.clear()
            cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            items=len(lines),
            final_amount=order.final_amount,
        )
        return str(order.id)


def place_order(
    principal: Principal,
    items,
    shipping_address,
    payment_method,
    shipping_charge=0.0,
    discount=0.0,
    notes=None,
    total_amount=None,
    final_amount=None,
) -> Order:
    """Place an order for ``principal`` while holding the stock locks of its products.

    Args:
        items: List of dicts with product_id, size, color and quantity.
        shipping_address: Dict with full_name, address, city, postal_code,
                          country and phone.
    """
    product_ids = [
        _normalize_item(item).get("product_id") for item in items or [] if isinstance(item, dict)
    ]

    with stock_locks.hold([pid for pid in product_ids if pid]):
        order_id = current_domain.process(
            PlaceOrder(
                user_id=principal.id,
                items=json.dumps(items or []),
                shipping_address=json.dumps(shipping_address or {}),
                payment_method=payment_method,
                shipping_charge=shipping_charge,
                discount=discount,
                notes=notes,
                total_amount=total_amount,
                final_amount=final_amount,
            ),
            asynchronous=False,
        )

    return current_domain.repository_for(Order).get(order_id)
