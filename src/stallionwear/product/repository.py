"""Repository for the Product aggregate."""

from stallionwear.domain import stallionwear
from stallionwear.product.product import Product


@stallionwear.repository(part_of=Product)
class ProductRepository:
    def find_by_name(self, name: str) -> Product | None:
        results = self._dao.query.filter(name=name).all().items
        return results[0] if results else None

    def filter_products(self, category=None, brand=None, min_price=None, max_price=None) -> list[Product]:
        """Products matching every supplied criterion, newest first. Price bounds are inclusive."""
        criteria = {
            key: value
            for key, value in {
                "category": category,
                "brand": brand,
                "price__gte": min_price,
                "price__lte": max_price,
            }.items()
            if value is not None
        }

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        products = query.all().items
        return sorted(products, key=lambda p: p.created_at, reverse=True)
