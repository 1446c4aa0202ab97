"""Inventory service — stock checks, pricing and the per-product write lock.

Order placement and cancellation are read-check-then-write sequences over
Product documents. ``StockLocks`` makes each product a single-writer
resource: callers hold the locks of every product they touch for the whole
unit of work, so a stock check and the decrement that follows it cannot
interleave with another order for the same product.
"""

import threading
from contextlib import ExitStack, contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stallionwear.errors import InsufficientStock, ProductNotFound, VariantNotFound
from stallionwear.product.product import Product

logger = structlog.get_logger(__name__)


class StockLocks:
    """Registry of one lock per product id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, product_id) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(str(product_id), threading.Lock())

    @contextmanager
    def hold(self, product_ids):
        """Acquire the locks of ``product_ids`` in a stable order."""
        with ExitStack() as stack:
            for product_id in sorted({str(pid) for pid in product_ids}):
                stack.enter_context(self.lock_for(product_id))
            yield


stock_locks = StockLocks()


class InventoryService:
    """Stateless operations over Product variant stock.

    Products are cached per instance so that one unit of work reads and
    writes a single copy of each product, however many lines refer to it.
    """

    def __init__(self) -> None:
        self.repo = current_domain.repository_for(Product)
        self._products: dict[str, Product] = {}

    def load(self, product_id) -> Product:
        key = str(product_id)
        if key not in self._products:
            try:
                self._products[key] = self.repo.get(key)
            except ObjectNotFoundError as exc:
                raise ProductNotFound({"product": [f"Product with ID {product_id} not found"]}) from exc
        return self._products[key]

    def ensure_in_stock(self, product, size, color, quantity) -> None:
        if not product.is_in_stock(size, color, quantity):
            raise InsufficientStock({"stock": [f"Insufficient stock for {product.name} ({size}, {color})"]})

    def decrement(self, product_id, size, color, quantity) -> None:
        self.load(product_id).decrement_stock(size, color, quantity)

    def restore(self, product_id, size, color, quantity) -> bool:
        """Return stock for one order line. Missing products or variants are skipped."""
        try:
            product = self.load(product_id)
            product.increment_stock(size, color, quantity)
        except (ProductNotFound, VariantNotFound):
            logger.warning(
                "stock_restoration_skipped",
                product_id=str(product_id),
                size=size,
                color=color,
                quantity=quantity,
            )
            return False
        return True

    def save_all(self) -> None:
        for product in self._products.values():
            self.repo.add(product)
