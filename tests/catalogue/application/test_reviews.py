"""Application tests for review eligibility and the review read models."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from stallionwear.errors import AccessDenied, OrderNotFound
from stallionwear.identity import Principal
from stallionwear.order.creation import place_order
from stallionwear.order.status import update_order_status
from stallionwear.product.product import Product
from stallionwear.product.reviews import (
    DeleteReview,
    add_review,
    delete_review,
    product_reviews,
    reviewable_products,
)


@pytest.fixture()
def order(customer, product_id, shipping_address):
    return place_order(
        customer,
        items=[{"product_id": product_id, "size": "L", "color": "Red", "quantity": 1}],
        shipping_address=shipping_address,
        payment_method="CashOnDelivery",
    )


@pytest.fixture()
def delivered_order(admin, order):
    return update_order_status(admin, order.id, order_status="Delivered")


def _review(actor_id, product_id, order_id, rating=5, comment="Great fit and sturdy fabric."):
    return add_review(Principal.user(actor_id), product_id, order_id, rating, comment)


class TestAddReview:
    def test_buyer_of_delivered_order_can_review(self, customer, product_id, delivered_order):
        _review(customer.id, product_id, delivered_order.id, rating=4)

        product = current_domain.repository_for(Product).get(product_id)
        assert len(product.reviews) == 1
        assert product.average_rating == 4.0

    def test_undelivered_order_is_not_eligible(self, customer, product_id, order):
        with pytest.raises(OrderNotFound):
            _review(customer.id, product_id, order.id)

    def test_someone_elses_order_is_not_eligible(self, other_customer, product_id, delivered_order):
        with pytest.raises(OrderNotFound):
            _review(other_customer.id, product_id, delivered_order.id)

    def test_product_must_be_in_the_order(self, customer, make_product, delivered_order):
        other_id = make_product(name="Denim Jacket")
        with pytest.raises(ValidationError):
            _review(customer.id, other_id, delivered_order.id)

    def test_one_review_per_user(self, customer, product_id, delivered_order):
        _review(customer.id, product_id, delivered_order.id)
        with pytest.raises(ValidationError):
            _review(customer.id, product_id, delivered_order.id)

    def test_rating_out_of_range(self, customer, product_id, delivered_order):
        with pytest.raises(ValidationError):
            _review(customer.id, product_id, delivered_order.id, rating=6)


class TestDeleteReview:
    def test_author_deletes_review(self, customer, product_id, delivered_order):
        review_id = _review(customer.id, product_id, delivered_order.id)

        current_domain.process(
            DeleteReview(
                actor_id=customer.id,
                actor_role=customer.role.value,
                product_id=product_id,
                review_id=review_id,
            ),
            asynchronous=False,
        )

        assert product_reviews(product_id)["total_reviews"] == 0

    def test_admin_deletes_any_review(self, admin, customer, product_id, delivered_order):
        review_id = _review(customer.id, product_id, delivered_order.id)

        delete_review(admin, product_id, review_id)

        assert product_reviews(product_id)["total_reviews"] == 0

    def test_other_users_cannot_delete(self, customer, other_customer, product_id, delivered_order):
        review_id = _review(customer.id, product_id, delivered_order.id)

        with pytest.raises(AccessDenied):
            current_domain.process(
                DeleteReview(
                    actor_id=other_customer.id,
                    actor_role=other_customer.role.value,
                    product_id=product_id,
                    review_id=review_id,
                ),
                asynchronous=False,
            )


class TestReviewReadModels:
    def test_reviewable_products_excludes_reviewed(self, customer, product_id, delivered_order):
        reviewable = reviewable_products(customer)
        assert [r["product_id"] for r in reviewable] == [product_id]

        _review(customer.id, product_id, delivered_order.id)

        assert reviewable_products(customer) == []

    def test_undelivered_orders_are_not_reviewable(self, customer, order):
        assert reviewable_products(customer) == []

    def test_product_reviews_distribution(self, customer, product_id, delivered_order):
        _review(customer.id, product_id, delivered_order.id, rating=4)

        summary = product_reviews(product_id)
        assert summary["distribution"] == {1: 0, 2: 0, 3: 0, 4: 1, 5: 0}
        assert summary["reviews"][0]["rating"] == 4
