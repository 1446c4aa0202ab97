"""Repository for the Cart aggregate."""

from stallionwear.cart.cart import Cart
from stallionwear.domain import stallionwear


@stallionwear.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return results[0] if results else None

    def for_user(self, user_id) -> Cart:
        """Return the user's cart, creating an unsaved one on first use."""
        return self.find_for_user(user_id) or Cart.create(user_id=str(user_id))
