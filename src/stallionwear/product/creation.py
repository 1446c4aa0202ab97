"""Product creation — command, handler, and the upload-then-create flow."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.errors import UpstreamFailure
from stallionwear.identity import Principal, require_admin
from stallionwear.media.port import MediaFile, MediaStore
from stallionwear.product.product import Product

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Product")
class CreateProduct:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)
    name = String(required=True, max_length=100)
    description = Text(required=True)
    price = Float(required=True)
    category = String(required=True, max_length=100)
    brand = String(required=True, max_length=100)
    variants = Text()  # JSON: list of {size, color, quantity, price_modifier}
    images = Text()  # JSON: list of {url, public_id}


@stallionwear.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        require_admin(command.actor_role)

        repo = current_domain.repository_for(Product)
        if repo.find_by_name(command.name) is not None:
            raise ValidationError({"name": ["Product already exists with this name"]})

        variants = json.loads(command.variants) if command.variants else []
        images = json.loads(command.images) if command.images else []

        product = Product.create(
            name=command.name.strip(),
            description=command.description,
            price=command.price,
            category=command.category.strip(),
            brand=command.brand.strip(),
            created_by=command.actor_id,
            variants=variants,
        )
        if images:
            product.attach_images(images)

        repo.add(product)
        return str(product.id)


def create_product(
    principal: Principal,
    media_store: MediaStore,
    files: list[MediaFile],
    name,
    description,
    price,
    category,
    brand,
    variants=None,
) -> str:
    """Upload product images, then create the product that references them.

    Partially failed uploads are tolerated as long as one image made it; if
    product creation is rejected, the uploaded images are deleted again.
    """
    require_admin(principal.role)

    uploads = media_store.upload_many(files)
    if not uploads.has_successes:
        raise UpstreamFailure({"images": ["All image uploads failed"]})
    if uploads.failed:
        logger.warning("product_images_partially_uploaded", failed=len(uploads.failed), name=name)

    try:
        command = CreateProduct(
            actor_id=principal.id,
            actor_role=principal.role.value,
            name=name,
            description=description,
            price=price,
            category=category,
            brand=brand,
            variants=json.dumps(variants or []),
            images=json.dumps([{"url": u.url, "public_id": u.public_id} for u in uploads.successful]),
        )
        return current_domain.process(command, asynchronous=False)
    except Exception:
        for upload in uploads.successful:
            media_store.delete(upload.public_id)
        raise
