"""Order aggregate — line item snapshots, totals and the status state machine.

State Machine:
    Processing → Confirmed → Shipped → Delivered
    Processing, Confirmed → Cancelled

Forward moves may skip states. Processing, Confirmed, Shipped and Delivered
orders may be set to their current status again to record or correct a
tracking number. Delivered and Cancelled are terminal. Orders are never
deleted.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from stallionwear.config import AMOUNT_EPSILON
from stallionwear.domain import stallionwear
from stallionwear.errors import AmountMismatch, InvalidAmount, InvalidTransition
from stallionwear.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusUpdated,
)

MAX_NOTES_LENGTH = 500


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "CashOnDelivery"
    STRIPE = "Stripe"
    PAYPAL = "PayPal"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class CancellationActor(Enum):
    USER = "User"
    ADMIN = "Admin"


_VALID_TRANSITIONS = {
    OrderStatus.PROCESSING: {
        OrderStatus.PROCESSING,
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.SHIPPED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.DELIVERED},  # Terminal; tracking number corrections only
    OrderStatus.CANCELLED: set(),  # Terminal
}

_CANCELLABLE_STATES = {OrderStatus.PROCESSING, OrderStatus.CONFIRMED}

ADDRESS_FIELDS = ("full_name", "address", "city", "postal_code", "country", "phone")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@stallionwear.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, captured in full at placement time."""

    full_name = String(required=True, max_length=100)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@stallionwear.entity(part_of="Order")
class OrderItem:
    """A snapshot of one purchased variant.

    The product name and price are copied from the product when the order is
    placed and are not affected by later catalogue changes.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=100)
    size = String(required=True, max_length=50)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.01)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@stallionwear.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    tracking_number = String(max_length=255)
    shipping_charge = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    final_amount = Float(required=True, min_value=0.0)
    notes = Text()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    cancelled_by = String(choices=CancellationActor)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def notes_must_be_short(self):
        if self.notes and len(self.notes) > MAX_NOTES_LENGTH:
            raise ValidationError({"notes": [f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"]})

    @invariant.post
    def amounts_must_reconcile(self):
        if self.total_amount is None or self.final_amount is None:
            return

        items_total = sum(item.price * item.quantity for item in self.items)
        if abs(self.total_amount - items_total) > AMOUNT_EPSILON:
            raise AmountMismatch({"total_amount": ["Total amount does not match sum of order items"]})

        expected_final = self.total_amount + (self.shipping_charge or 0.0) - (self.discount or 0.0)
        if abs(self.final_amount - expected_final) > AMOUNT_EPSILON:
            raise AmountMismatch({"final_amount": ["Final amount calculation is incorrect"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        items,
        shipping_address,
        payment_method,
        shipping_charge=0.0,
        discount=0.0,
        notes=None,
        total_amount=None,
        final_amount=None,
    ):
        """Create an order from priced line items.

        Args:
            items: List of dicts with product_id, product_name, size, color,
                   quantity and price (the final variant price).
            shipping_address: Dict with the six address fields.
            total_amount: Optional client-computed item total to verify.
            final_amount: Optional client-computed amount due to verify.
        """
        if not items:
            raise ValidationError({"items": ["Order items are required"]})
        if payment_method not in [m.value for m in PaymentMethod]:
            raise ValidationError({"payment_method": ["Valid payment method is required"]})
        if notes and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError({"notes": [f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"]})

        shipping_charge = shipping_charge or 0.0
        discount = discount or 0.0

        lines = [{**item, "subtotal": item["price"] * item["quantity"]} for item in items]
        computed_total = round(sum(line["subtotal"] for line in lines), 2)
        computed_final = round(computed_total + shipping_charge - discount, 2)

        if computed_final <= 0:
            raise InvalidAmount({"final_amount": ["Final order amount must be greater than 0"]})
        if total_amount is not None and abs(total_amount - computed_total) > AMOUNT_EPSILON:
            raise AmountMismatch(
                {"total_amount": [f"Total amount does not match sum of order items ({computed_total:.2f})"]}
            )
        if final_amount is not None and abs(final_amount - computed_final) > AMOUNT_EPSILON:
            raise AmountMismatch({"final_amount": [f"Final amount calculation is incorrect ({computed_final:.2f})"]})

        address = shipping_address or {}
        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            items=[OrderItem(**line) for line in lines],
            shipping_address=ShippingAddress(**{field: address.get(field) for field in ADDRESS_FIELDS}),
            payment_method=payment_method,
            shipping_charge=shipping_charge,
            discount=discount,
            total_amount=computed_total,
            final_amount=computed_final,
            notes=notes or "",
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps(
                    [{**line, "product_id": str(line["product_id"])} for line in lines]
                ),
                payment_method=payment_method,
                total_amount=computed_total,
                shipping_charge=shipping_charge,
                discount=discount,
                final_amount=computed_final,
                total_items=order.total_items,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def status(self):
        return OrderStatus(self.order_status)

    @property
    def total_items(self):
        return sum(item.quantity for item in self.items)

    @property
    def can_be_cancelled(self):
        return self.status in _CANCELLABLE_STATES

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = self.status
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(
                {"order_status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def update_status(self, new_status, tracking_number=None):
        """Administrative status change.

        A move to Cancelled is a cancellation by an administrator; the caller
        is responsible for restoring stock.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError as exc:
            raise ValidationError({"order_status": ["Invalid order status"]}) from exc

        if target == OrderStatus.CANCELLED:
            if tracking_number:
                self.tracking_number = tracking_number
            self.cancel(CancellationActor.ADMIN.value)
            return

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.order_status = target.value
        if tracking_number:
            self.tracking_number = tracking_number
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

        if target == OrderStatus.DELIVERED and previous != OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = now
            self.raise_(OrderDelivered(order_id=str(self.id), user_id=str(self.user_id), delivered_at=now))

    def cancel(self, cancelled_by):
        """Move the order to Cancelled. Stock restoration is done by the caller."""
        current = self.status
        if current not in _CANCELLABLE_STATES:
            raise InvalidTransition(
                {
                    "order_status": [
                        f"Cannot cancel order in {current.value} state. "
                        f"Cancellation is only allowed from: "
                        f"{', '.join(s.value for s in sorted(_CANCELLABLE_STATES, key=lambda s: s.value))}"
                    ]
                }
            )

        now = datetime.now(UTC)
        self.order_status = OrderStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=current.value,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def update_payment_status(self, payment_status):
        """Set the payment status. Independent of the order status."""
        try:
            target = PaymentStatus(payment_status)
        except ValueError as exc:
            raise ValidationError({"payment_status": ["Invalid payment status"]}) from exc

        previous = self.payment_status
        self.payment_status = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentStatusUpdated(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
            )
        )
