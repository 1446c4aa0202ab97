"""Administrative order updates — order status and payment status."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.identity import Principal, require_admin
from stallionwear.order.cancellation import load_order, restore_stock
from stallionwear.order.order import Order, OrderStatus
from stallionwear.product.inventory import stock_locks

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Order")
class UpdateOrderStatus:
    actor_role = String(required=True, max_length=10)
    order_id = Identifier(required=True)
    order_status = String(required=True, max_length=20)
    tracking_number = String(max_length=255)


@stallionwear.command(part_of="Order")
class UpdatePaymentStatus:
    actor_role = String(required=True, max_length=10)
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)


@stallionwear.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        require_admin(command.actor_role)

        order = load_order(command.order_id)
        previous = order.status
        order.update_status(command.order_status, tracking_number=command.tracking_number)

        if order.status == OrderStatus.CANCELLED:
            restored = restore_stock(order)
            logger.info(
                "order_cancelled",
                order_id=str(order.id),
                cancelled_by=order.cancelled_by,
                lines_restored=restored,
                lines_total=len(order.items),
            )
        else:
            logger.info(
                "order_status_updated",
                order_id=str(order.id),
                previous_status=previous.value,
                new_status=order.order_status,
            )

        current_domain.repository_for(Order).add(order)

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        require_admin(command.actor_role)

        order = load_order(command.order_id)
        order.update_payment_status(command.payment_status)
        current_domain.repository_for(Order).add(order)


def update_order_status(
    principal: Principal, order_id, order_status=None, tracking_number=None, payment_status=None
) -> Order:
    """Apply an admin update of order status and/or payment status.

    Both updates run under the order's product locks, which also serialize
    them with cancellation, and a move to Cancelled restores stock without
    racing order placement.
    """
    require_admin(principal.role)
    order = load_order(order_id)

    with stock_locks.hold([item.product_id for item in order.items]):
        if order_status:
            current_domain.process(
                UpdateOrderStatus(
                    actor_role=principal.role.value,
                    order_id=order_id,
                    order_status=order_status,
                    tracking_number=tracking_number,
                ),
                asynchronous=False,
            )

        if payment_status:
            current_domain.process(
                UpdatePaymentStatus(actor_role=principal.role.value, order_id=order_id, payment_status=payment_status),
                asynchronous=False,
            )

    return load_order(order_id)
