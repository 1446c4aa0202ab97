"""Application tests for product creation, images, variants and deletion."""

import pytest
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.utils.globals import current_domain

from stallionwear.errors import AccessDenied, ProductNotFound, UpstreamFailure, status_code_for
from stallionwear.media.fake_adapter import FakeMediaStore
from stallionwear.media.port import MediaFile
from stallionwear.order.creation import place_order
from stallionwear.product.creation import create_product
from stallionwear.product.details import (
    UpdateProductDetails,
    delete_product,
    replace_variants,
    update_product_details,
)
from stallionwear.product.images import remove_product_image, upload_product_images
from stallionwear.product.product import Product


@pytest.fixture()
def store():
    return FakeMediaStore()


def _files(*names):
    return [MediaFile(filename=name, content=b"\x89PNG") for name in names]


def _create(admin, store, files=None, **overrides):
    data = {
        "name": "Classic Tee",
        "description": "A heavyweight cotton tee with a relaxed fit.",
        "price": 20.0,
        "category": "Shirts",
        "brand": "Stallion",
        "variants": [{"size": "L", "color": "Red", "quantity": 5, "price_modifier": 2.0}],
    }
    data.update(overrides)
    return create_product(admin, store, files if files is not None else _files("front.png"), **data)


class TestCreateProduct:
    def test_creates_product_with_uploaded_images(self, admin, store):
        product_id = _create(admin, store, files=_files("front.png", "back.png"))

        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Classic Tee"
        assert product.created_by == admin.id
        assert len(product.images) == 2
        assert product.get_variant("L", "Red").quantity == 5

    def test_partial_upload_failure_keeps_successful_images(self, admin, store):
        store.configure(failing_filenames=["back.png"])

        product_id = _create(admin, store, files=_files("front.png", "back.png"))

        product = current_domain.repository_for(Product).get(product_id)
        assert len(product.images) == 1

    def test_all_uploads_failing_is_an_upstream_failure(self, admin, store):
        store.configure(should_succeed=False)

        with pytest.raises(UpstreamFailure):
            _create(admin, store)

    def test_no_images_is_rejected(self, admin, store):
        with pytest.raises(ValidationError):
            _create(admin, store, files=[])

    def test_non_admin_is_denied(self, customer, store):
        with pytest.raises(AccessDenied):
            _create(customer, store)
        assert store.files == {}

    def test_duplicate_name_is_rejected_and_uploads_removed(self, admin, store):
        _create(admin, store)
        stored_before = len(store.files)

        with pytest.raises(ValidationError):
            _create(admin, store)
        assert len(store.files) == stored_before


class TestProductImages:
    def test_upload_appends_images(self, admin, store):
        product_id = _create(admin, store)

        upload_product_images(admin, store, product_id, _files("side.png"))

        product = current_domain.repository_for(Product).get(product_id)
        assert len(product.images) == 2

    def test_remove_image_deletes_from_store(self, admin, store):
        product_id = _create(admin, store)
        product = current_domain.repository_for(Product).get(product_id)
        public_id = product.images[0].public_id

        remove_product_image(admin, store, product_id, public_id)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.images == []
        assert public_id not in store.files


class TestProductAdministration:
    def test_update_details(self, admin, store):
        product_id = _create(admin, store)
        current_domain.process(
            UpdateProductDetails(actor_role=admin.role.value, product_id=product_id, price=24.0),
            asynchronous=False,
        )

        product = current_domain.repository_for(Product).get(product_id)
        assert product.price == 24.0

    def test_update_product_details_facade(self, admin, store):
        product_id = _create(admin, store)

        update_product_details(admin, product_id, name="Classic Tee v2", brand="Stallion Basics")

        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Classic Tee v2"
        assert product.brand == "Stallion Basics"
        assert product.price == 20.0

    def test_stale_product_write_is_a_conflict(self, admin, customer, store, shipping_address):
        product_id = _create(admin, store)
        repo = current_domain.repository_for(Product)
        stale = repo.get(product_id)

        place_order(
            customer,
            items=[{"product_id": product_id, "size": "L", "color": "Red", "quantity": 1}],
            shipping_address=shipping_address,
            payment_method="CashOnDelivery",
        )

        stale.update_details(price=30.0)
        with pytest.raises(ExpectedVersionError) as exc_info:
            repo.add(stale)
        assert status_code_for(exc_info.value) == 409

    def test_update_details_requires_admin(self, admin, customer, store):
        product_id = _create(admin, store)
        with pytest.raises(AccessDenied):
            current_domain.process(
                UpdateProductDetails(actor_role=customer.role.value, product_id=product_id, price=1.0),
                asynchronous=False,
            )

    def test_replace_variants(self, admin, store):
        product_id = _create(admin, store)

        replace_variants(admin, product_id, [{"size": "S", "color": "White", "quantity": 3}])

        product = current_domain.repository_for(Product).get(product_id)
        assert product.total_stock == 3
        assert product.get_variant("L", "Red") is None

    def test_replace_variants_on_missing_product(self, admin):
        with pytest.raises(ProductNotFound):
            replace_variants(admin, "missing", [])

    def test_delete_product_removes_images(self, admin, store):
        product_id = _create(admin, store, files=_files("front.png", "back.png"))
        assert len(store.files) == 2

        delete_product(admin, store, product_id)

        assert store.files == {}
        with pytest.raises(ProductNotFound):
            replace_variants(admin, product_id, [])
