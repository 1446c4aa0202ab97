"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from stallionwear.domain import stallionwear


@stallionwear.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    category = String(required=True)
    brand = String(required=True)
    created_by = Identifier(required=True)
    created_at = DateTime(required=True)


@stallionwear.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    category = String()
    brand = String()


@stallionwear.event(part_of="Product")
class VariantsReplaced:
    """An administrator replaced the full variant list of a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    variants = Text(required=True)  # JSON: list of {size, color, quantity, price_modifier}
    total_stock = Integer(required=True)


@stallionwear.event(part_of="Product")
class VariantStockDecremented:
    """Stock for one variant was taken by an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    requested = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@stallionwear.event(part_of="Product")
class VariantStockRestored:
    """Stock for one variant was returned by a cancelled order."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@stallionwear.event(part_of="Product")
class ProductImagesAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    urls = Text(required=True)  # JSON: list of image URLs


@stallionwear.event(part_of="Product")
class ProductImageRemoved:
    __version__ = 1

    product_id = Identifier(required=True)
    public_id = String(required=True)


@stallionwear.event(part_of="Product")
class ReviewAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    average_rating = Float(required=True)


@stallionwear.event(part_of="Product")
class ReviewDeleted:
    __version__ = 1

    product_id = Identifier(required=True)
    review_id = Identifier(required=True)
    average_rating = Float(required=True)
