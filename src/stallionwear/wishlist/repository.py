"""Repository for the Wishlist aggregate."""

from stallionwear.domain import stallionwear
from stallionwear.wishlist.wishlist import Wishlist


@stallionwear.repository(part_of=Wishlist)
class WishlistRepository:
    def find_for_user(self, user_id) -> Wishlist | None:
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return results[0] if results else None

    def for_user(self, user_id) -> Wishlist:
        return self.find_for_user(user_id) or Wishlist.create(user_id=str(user_id))
