"""Repository for the Order aggregate."""

from stallionwear.domain import stallionwear
from stallionwear.order.order import Order, OrderStatus


@stallionwear.repository(part_of=Order)
class OrderRepository:
    def filter_orders(self, user_id=None, order_status=None, payment_status=None, payment_method=None) -> list[Order]:
        """Orders matching every supplied criterion, newest first."""
        criteria = {
            key: value
            for key, value in {
                "user_id": str(user_id) if user_id is not None else None,
                "order_status": order_status,
                "payment_status": payment_status,
                "payment_method": payment_method,
            }.items()
            if value is not None
        }

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        orders = query.all().items
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def for_user(self, user_id) -> list[Order]:
        return self.filter_orders(user_id=user_id)

    def delivered_for_user(self, user_id) -> list[Order]:
        return [
            order
            for order in self.filter_orders(user_id=user_id, order_status=OrderStatus.DELIVERED.value)
            if order.is_delivered
        ]
