"""Product aggregate root with Variant, ProductImage and Review entities.

Variants are the stock-keeping units of a product: each ``(size, color)``
pair carries its own quantity and a price modifier on top of the product's
base price. Variant quantity is the only authoritative stock count.
"""

import json
from datetime import UTC, datetime

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from stallionwear.domain import stallionwear
from stallionwear.errors import ItemNotFound, VariantNotFound
from stallionwear.product.events import (
    ProductCreated,
    ProductDetailsUpdated,
    ProductImageRemoved,
    ProductImagesAdded,
    ReviewAdded,
    ReviewDeleted,
    VariantsReplaced,
    VariantStockDecremented,
    VariantStockRestored,
)

logger = structlog.get_logger(__name__)

MIN_DESCRIPTION_LENGTH = 10
MIN_REVIEW_COMMENT_LENGTH = 10


@stallionwear.entity(part_of="Product")
class Variant:
    """A specific (size, color) stock-keeping unit of a product."""

    size: String(required=True, max_length=50)
    color: String(required=True, max_length=50)
    quantity: Integer(default=0, min_value=0)
    price_modifier: Float(default=0.0)


@stallionwear.entity(part_of="Product")
class ProductImage:
    url: String(required=True, max_length=500)
    public_id: String(max_length=255)
    position: Integer(default=0)


@stallionwear.entity(part_of="Product")
class Review:
    user_id: Identifier(required=True)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: Text(required=True)
    created_at: DateTime()


@stallionwear.aggregate
class Product:
    name: String(required=True, min_length=2, max_length=100)
    description: Text(required=True)
    price: Float(required=True, min_value=0.01)
    category: String(required=True, max_length=100)
    brand: String(required=True, max_length=100)
    images: HasMany(ProductImage)
    variants: HasMany(Variant)
    reviews: HasMany(Review)
    created_by: Identifier(required=True)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def description_must_be_descriptive(self):
        if self.description is not None and len(self.description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(
                {"description": [f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters long"]}
            )

    @invariant.post
    def variants_must_be_unique(self):
        keys = [(v.size, v.color) for v in self.variants]
        if len(keys) != len(set(keys)):
            raise ValidationError({"variants": ["Each (size, color) pair must be unique within a product"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, price, category, brand, created_by, variants=None):
        """Create a product, optionally with its initial variants.

        Args:
            variants: List of dicts with size, color, quantity, price_modifier.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            category=category,
            brand=brand,
            created_by=created_by,
            variants=[_build_variant(v) for v in variants or []],
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=name,
                price=price,
                category=category,
                brand=brand,
                created_by=str(created_by),
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Variant inventory
    # -------------------------------------------------------------------
    def get_variant(self, size, color):
        return next((v for v in self.variants if v.size == size and v.color == color), None)

    def is_in_stock(self, size, color, quantity=1):
        variant = self.get_variant(size, color)
        return variant is not None and variant.quantity >= quantity

    def final_price(self, size, color):
        """Base price plus the variant's modifier.

        Products without a matching variant are priced at the base price.
        """
        variant = self.get_variant(size, color)
        modifier = variant.price_modifier if variant else 0.0
        return self.price + (modifier or 0.0)

    @property
    def total_stock(self):
        return sum(v.quantity for v in self.variants)

    @property
    def average_rating(self):
        if not self.reviews:
            return 0
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 1)

    def _require_variant(self, size, color):
        variant = self.get_variant(size, color)
        if variant is None:
            raise VariantNotFound({"variant": [f"Variant ({size}, {color}) not found for product {self.id}"]})
        return variant

    def decrement_stock(self, size, color, quantity):
        """Take ``quantity`` units of a variant, clamping at zero."""
        variant = self._require_variant(size, color)

        previous = variant.quantity
        if quantity > previous:
            logger.warning(
                "variant_stock_clamped",
                product_id=str(self.id),
                size=size,
                color=color,
                requested=quantity,
                available=previous,
            )
        variant.quantity = max(0, previous - quantity)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantStockDecremented(
                product_id=str(self.id),
                size=size,
                color=color,
                requested=quantity,
                previous_quantity=previous,
                new_quantity=variant.quantity,
            )
        )

    def increment_stock(self, size, color, quantity):
        """Return ``quantity`` units to a variant."""
        variant = self._require_variant(size, color)

        variant.quantity += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantStockRestored(
                product_id=str(self.id),
                size=size,
                color=color,
                quantity=quantity,
                new_quantity=variant.quantity,
            )
        )

    def replace_variants(self, variants):
        """Administrative update: replace every variant of the product."""
        with atomic_change(self):
            for variant in list(self.variants):
                self.remove_variants(variant)
            for data in variants:
                self.add_variants(_build_variant(data))

        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantsReplaced(
                product_id=str(self.id),
                variants=json.dumps(
                    [
                        {
                            "size": v.size,
                            "color": v.color,
                            "quantity": v.quantity,
                            "price_modifier": v.price_modifier,
                        }
                        for v in self.variants
                    ]
                ),
                total_stock=self.total_stock,
            )
        )

    # -------------------------------------------------------------------
    # Details and images
    # -------------------------------------------------------------------
    def update_details(self, name=None, description=None, price=None, category=None, brand=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if price is not None:
            self.price = price
        if category is not None:
            self.category = category
        if brand is not None:
            self.brand = brand

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                category=self.category,
                brand=self.brand,
            )
        )

    def attach_images(self, uploads):
        """Append uploaded images after the existing ones.

        Args:
            uploads: List of dicts with url and public_id.
        """
        position = len(self.images)
        for upload in uploads:
            self.add_images(
                ProductImage(
                    url=upload["url"],
                    public_id=upload.get("public_id"),
                    position=position,
                )
            )
            position += 1

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductImagesAdded(
                product_id=str(self.id),
                urls=json.dumps([upload["url"] for upload in uploads]),
            )
        )

    def remove_image(self, public_id):
        image = next((i for i in self.images if i.public_id == public_id), None)
        if image is None:
            raise ItemNotFound({"images": [f"Image {public_id} not found"]})

        with atomic_change(self):
            self.remove_images(image)
            for position, remaining in enumerate(self.ordered_images()):
                remaining.position = position

        self.updated_at = datetime.now(UTC)

        self.raise_(ProductImageRemoved(product_id=str(self.id), public_id=public_id))

    def ordered_images(self):
        return sorted(self.images, key=lambda i: i.position or 0)

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def review_by(self, user_id):
        return next((r for r in self.reviews if str(r.user_id) == str(user_id)), None)

    def add_review(self, user_id, rating, comment):
        if self.review_by(user_id) is not None:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        comment = (comment or "").strip()
        if len(comment) < MIN_REVIEW_COMMENT_LENGTH:
            raise ValidationError(
                {"comment": [f"Comment must be at least {MIN_REVIEW_COMMENT_LENGTH} characters long"]}
            )

        review = Review(
            user_id=user_id,
            rating=rating,
            comment=comment,
            created_at=datetime.now(UTC),
        )
        self.add_reviews(review)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ReviewAdded(
                product_id=str(self.id),
                review_id=str(review.id),
                user_id=str(user_id),
                rating=rating,
                average_rating=self.average_rating,
            )
        )
        return review

    def delete_review(self, review_id):
        review = next((r for r in self.reviews if str(r.id) == str(review_id)), None)
        if review is None:
            raise ItemNotFound({"review": [f"Review {review_id} not found"]})

        self.remove_reviews(review)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ReviewDeleted(
                product_id=str(self.id),
                review_id=str(review_id),
                average_rating=self.average_rating,
            )
        )


def _build_variant(data):
    return Variant(
        size=str(data["size"]).strip(),
        color=str(data["color"]).strip(),
        quantity=int(data.get("quantity", 0)),
        price_modifier=float(data.get("price_modifier", 0.0)),
    )
