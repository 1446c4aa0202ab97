"""StallionWear domain — catalogue inventory, carts, wishlists and orders.

A single bounded context: order placement has to read and write Product
stock, the user's Cart and the Order in one unit of work, so all aggregates
are registered on the same domain.

Element packages (``product``, ``cart``, ``wishlist``, ``order``) sit directly next to
this module: ``init()`` discovers elements by walking this directory and its
immediate subpackages.
"""

import structlog
from protean.domain import Domain

stallionwear = Domain(name="stallionwear")

logger = structlog.get_logger(__name__)
