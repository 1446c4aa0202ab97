"""Catalogue read side — product lookup and filtered listing."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stallionwear.errors import ProductNotFound
from stallionwear.product.product import Product


def get_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise ProductNotFound({"product": ["Product not found with this ID"]}) from exc


def _matches(product, terms):
    haystack = " ".join(filter(None, (product.name, product.description, product.brand))).lower()
    return any(term in haystack for term in terms)


def list_products(category=None, brand=None, min_price=None, max_price=None, search=None) -> list[Product]:
    """Products filtered by category, brand and an inclusive price range, newest first.

    ``search`` keeps products whose name, description or brand contains any of
    its whitespace-separated terms, case-insensitively.
    """
    products = current_domain.repository_for(Product).filter_products(
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
    )

    terms = (search or "").lower().split()
    if terms:
        products = [p for p in products if _matches(p, terms)]
    return products
