"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from stallionwear.domain import stallionwear


@stallionwear.event(part_of="Order")
class OrderPlaced:
    """An order was created from validated line items."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, product_name, size, color, quantity, price, subtotal}
    payment_method = String(required=True)
    total_amount = Float(required=True)
    shipping_charge = Float(required=True)
    discount = Float(required=True)
    final_amount = Float(required=True)
    total_items = Integer(required=True)
    placed_at = DateTime(required=True)


@stallionwear.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    tracking_number = String()
    changed_at = DateTime(required=True)


@stallionwear.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@stallionwear.event(part_of="Order")
class OrderCancelled:
    """The order reached the terminal Cancelled state."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@stallionwear.event(part_of="Order")
class PaymentStatusUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
