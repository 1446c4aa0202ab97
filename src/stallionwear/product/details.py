"""Product administration — details, variants and deletion."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.identity import Principal, require_admin
from stallionwear.media.port import MediaStore
from stallionwear.product.inventory import InventoryService, stock_locks
from stallionwear.product.product import Product

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Product")
class UpdateProductDetails:
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    price = Float()
    category = String(max_length=100)
    brand = String(max_length=100)


@stallionwear.command(part_of="Product")
class ReplaceVariants:
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)
    variants = Text(required=True)  # JSON: list of {size, color, quantity, price_modifier}


@stallionwear.command(part_of="Product")
class DeleteProduct:
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)


@stallionwear.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        require_admin(command.actor_role)

        inventory = InventoryService()
        product = inventory.load(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            brand=command.brand,
        )
        inventory.save_all()

    @handle(ReplaceVariants)
    def replace_variants(self, command):
        require_admin(command.actor_role)

        variants = json.loads(command.variants) if isinstance(command.variants, str) else command.variants

        inventory = InventoryService()
        product = inventory.load(command.product_id)
        product.replace_variants(variants)
        inventory.save_all()

    @handle(DeleteProduct)
    def delete_product(self, command):
        require_admin(command.actor_role)

        inventory = InventoryService()
        product = inventory.load(command.product_id)
        public_ids = [image.public_id for image in product.ordered_images() if image.public_id]

        inventory.repo._dao.delete(product)
        return public_ids


def update_product_details(principal: Principal, product_id, **changes) -> None:
    """Apply an admin update of name, description, price, category or brand."""
    with stock_locks.hold([product_id]):
        current_domain.process(
            UpdateProductDetails(actor_role=principal.role.value, product_id=product_id, **changes),
            asynchronous=False,
        )


def replace_variants(principal: Principal, product_id, variants) -> None:
    """Replace a product's variants while holding its stock lock."""
    with stock_locks.hold([product_id]):
        current_domain.process(
            ReplaceVariants(
                actor_role=principal.role.value,
                product_id=product_id,
                variants=json.dumps(variants),
            ),
            asynchronous=False,
        )


def delete_product(principal: Principal, media_store: MediaStore, product_id) -> None:
    """Delete a product, then remove its images from the media store."""
    with stock_locks.hold([product_id]):
        public_ids = current_domain.process(
            DeleteProduct(actor_role=principal.role.value, product_id=product_id),
            asynchronous=False,
        )

    for public_id in public_ids or []:
        if not media_store.delete(public_id):
            logger.warning("product_image_not_deleted", product_id=str(product_id), public_id=public_id)
