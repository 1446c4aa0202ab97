"""Order cancellation — command, handler, stock restoration and the locked flow."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.errors import OrderNotFound
from stallionwear.identity import Principal, Role
from stallionwear.order.order import CancellationActor, Order
from stallionwear.product.inventory import InventoryService, stock_locks

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Order")
class CancelOrder:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    order_id = Identifier(required=True)


def load_order(order_id, principal: Principal | None = None) -> Order:
    """Fetch an order. Orders the principal may not see are reported as missing."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise OrderNotFound({"order": ["Order not found"]}) from exc

    if principal is not None and not principal.owns(order.user_id):
        raise OrderNotFound({"order": ["Order not found"]})
    return order


def restore_stock(order: Order) -> int:
    """Return every item of a cancelled order to inventory.

    Products or variants that no longer exist are skipped. Returns the
    number of lines restored.
    """
    inventory = InventoryService()
    restored = 0
    for item in order.items:
        if inventory.restore(item.product_id, item.size, item.color, item.quantity):
            restored += 1
    inventory.save_all()
    return restored


@stallionwear.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        principal = Principal(id=str(command.actor_id), role=Role(command.actor_role))
        order = load_order(command.order_id, principal)

        actor = CancellationActor.ADMIN if principal.is_admin else CancellationActor.USER
        order.cancel(actor.value)
        restored = restore_stock(order)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            cancelled_by=actor.value,
            lines_restored=restored,
            lines_total=len(order.items),
        )


def cancel_order(principal: Principal, order_id) -> Order:
    """Cancel an order as its owner or an admin, holding the locks of its products."""
    order = load_order(order_id, principal)

    with stock_locks.hold([item.product_id for item in order.items]):
        current_domain.process(
            CancelOrder(actor_id=principal.id, actor_role=principal.role.value, order_id=order_id),
            asynchronous=False,
        )

    return load_order(order_id)
