"""Order read side — lookups scoped to the principal and order descriptions."""

from protean.utils.globals import current_domain

from stallionwear.errors import ProductNotFound
from stallionwear.identity import Principal
from stallionwear.order.cancellation import load_order
from stallionwear.order.order import Order
from stallionwear.product.inventory import InventoryService


def get_order(principal: Principal, order_id) -> Order:
    """Users see their own orders only; admins see every order."""
    return load_order(order_id, principal)


def list_orders(principal: Principal, order_status=None, payment_status=None, payment_method=None) -> list[Order]:
    repo = current_domain.repository_for(Order)
    return repo.filter_orders(
        user_id=None if principal.is_admin else principal.id,
        order_status=order_status,
        payment_status=payment_status,
        payment_method=payment_method,
    )


def _product_summary(inventory, product_id):
    try:
        product = inventory.load(product_id)
    except ProductNotFound:
        return None

    images = product.ordered_images()
    return {
        "id": str(product.id),
        "name": product.name,
        "brand": product.brand,
        "category": product.category,
        "image": images[0].url if images else None,
    }


def describe_order(order: Order) -> dict:
    """Flatten an order, attaching a summary of each product that still exists."""
    inventory = InventoryService()
    address = order.shipping_address

    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "product": _product_summary(inventory, item.product_id),
                "size": item.size,
                "color": item.color,
                "quantity": item.quantity,
                "price": item.price,
                "subtotal": item.subtotal,
            }
            for item in order.items
        ],
        "shipping_address": {
            "full_name": address.full_name,
            "address": address.address,
            "city": address.city,
            "postal_code": address.postal_code,
            "country": address.country,
            "phone": address.phone,
        },
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "tracking_number": order.tracking_number,
        "shipping_charge": order.shipping_charge,
        "discount": order.discount,
        "total_amount": order.total_amount,
        "final_amount": order.final_amount,
        "total_items": order.total_items,
        "notes": order.notes,
        "is_delivered": order.is_delivered,
        "delivered_at": order.delivered_at,
        "cancelled_by": order.cancelled_by,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
