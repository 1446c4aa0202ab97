"""Image management — commands, handler, and media store orchestration."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from stallionwear.domain import stallionwear
from stallionwear.errors import UpstreamFailure
from stallionwear.identity import Principal, require_admin
from stallionwear.media.port import BatchUploadResult, MediaFile, MediaStore
from stallionwear.product.inventory import InventoryService, stock_locks
from stallionwear.product.product import Product

logger = structlog.get_logger(__name__)


@stallionwear.command(part_of="Product")
class AttachProductImages:
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)
    images = Text(required=True)  # JSON: list of {url, public_id}


@stallionwear.command(part_of="Product")
class RemoveProductImage:
    actor_role = String(required=True, max_length=10)
    product_id = Identifier(required=True)
    public_id = String(required=True, max_length=255)


@stallionwear.command_handler(part_of=Product)
class ManageImagesHandler:
    @handle(AttachProductImages)
    def attach_images(self, command):
        require_admin(command.actor_role)

        inventory = InventoryService()
        product = inventory.load(command.product_id)
        product.attach_images(json.loads(command.images))
        inventory.save_all()

    @handle(RemoveProductImage)
    def remove_image(self, command):
        require_admin(command.actor_role)

        inventory = InventoryService()
        product = inventory.load(command.product_id)
        product.remove_image(command.public_id)
        inventory.save_all()


def upload_product_images(
    principal: Principal, media_store: MediaStore, product_id, files: list[MediaFile]
) -> BatchUploadResult:
    """Upload files and append the successful ones to the product's images."""
    require_admin(principal.role)

    uploads = media_store.upload_many(files)
    if not uploads.has_successes:
        raise UpstreamFailure({"images": ["Failed to upload product images"]})
    if uploads.failed:
        logger.warning("product_images_partially_uploaded", product_id=str(product_id), failed=len(uploads.failed))

    images = json.dumps([{"url": u.url, "public_id": u.public_id} for u in uploads.successful])
    try:
        with stock_locks.hold([product_id]):
            current_domain.process(
                AttachProductImages(actor_role=principal.role.value, product_id=product_id, images=images),
                asynchronous=False,
            )
    except Exception:
        for upload in uploads.successful:
            media_store.delete(upload.public_id)
        raise

    return uploads


def remove_product_image(principal: Principal, media_store: MediaStore, product_id, public_id) -> None:
    """Detach an image from the product and delete it from the media store."""
    with stock_locks.hold([product_id]):
        current_domain.process(
            RemoveProductImage(actor_role=principal.role.value, product_id=product_id, public_id=public_id),
            asynchronous=False,
        )
    if not media_store.delete(public_id):
        logger.warning("product_image_not_deleted", product_id=str(product_id), public_id=public_id)
