# storefront/modules/reviews/tests/test_review_service.py

import pytest
from concurrent.futures import ThreadPoolExecutor
from sqlalchemy.exc import OperationalError

from storefront.core.exceptions import GoneError, NotFoundError, PayloadTooLargeError
from storefront.modules.reviews.schemas.review_schemas import (
    BatchItemError,
    ReviewBatchRequest,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from storefront.modules.reviews.services.review_service import ProductReviewService
from storefront.modules.reviews.services.review_store import InMemoryReviewStore


pytestmark = pytest.mark.unit


def _create(service: ProductReviewService, product_id: int = 1, **overrides):
    data = {"review": "Great product.", "name": "Jane", "email": "jane@example.com"}
    data.update(overrides)
    return service.create_review(product_id, ReviewCreate(**data))


class TestProductReviewService:
    """Test cases for ProductReviewService"""

    def test_create_review_success(self, review_service: ProductReviewService):
        review = _create(review_service, rating=4)

        assert review.id == 1
        assert review.product_id == 1
        assert review.review == "Great product."
        assert review.rating == 4
        assert review.verified is False
        assert review.date_created.microsecond == 0

    def test_create_review_verified_purchase(self, review_service: ProductReviewService):
        """Test purchase records mark the review verified, ignoring email case"""
        review = _create(review_service, email="BUYER@example.com")

        assert review.verified is True

    def test_create_review_unknown_product(self, review_service: ProductReviewService):
        with pytest.raises(NotFoundError) as exc_info:
            _create(review_service, product_id=99)

        assert exc_info.value.error_code == "PRODUCT_INVALID_ID"

    def test_ids_are_unique_under_concurrency(self, review_service: ProductReviewService):
        """Test concurrent creates never hand out the same id"""
        with ThreadPoolExecutor(max_workers=8) as pool:
            reviews = list(pool.map(lambda i: _create(review_service, name=f"R{i}"), range(50)))

        assert len({review.id for review in reviews}) == 50
        assert len(review_service.list_reviews(1)) == 50

    def test_list_reviews_scoped_to_product(self, review_service: ProductReviewService):
        first = _create(review_service)
        _create(review_service, product_id=2)
        second = _create(review_service)

        reviews = review_service.list_reviews(1)

        assert [review.id for review in reviews] == [first.id, second.id]

    def test_list_reviews_unknown_product(self, review_service: ProductReviewService):
        with pytest.raises(NotFoundError):
            review_service.list_reviews(99)

    def test_get_review_wrong_product(self, review_service: ProductReviewService):
        review = _create(review_service)

        with pytest.raises(NotFoundError) as exc_info:
            review_service.get_review(2, review.id)

        assert exc_info.value.error_code == "REVIEW_INVALID_ID"

    def test_update_review_only_supplied_fields(self, review_service: ProductReviewService):
        review = _create(review_service, rating=2)

        updated = review_service.update_review(1, review.id, ReviewUpdate(rating=5))

        assert updated.rating == 5
        assert updated.review == review.review
        assert updated.name == review.name
        assert updated.date_created == review.date_created

    def test_update_review_not_found(self, review_service: ProductReviewService):
        with pytest.raises(NotFoundError):
            review_service.update_review(1, 42, ReviewUpdate(review="Nope."))

    def test_delete_review_trash_then_gone(self, review_service: ProductReviewService):
        """Test a trashed review cannot be trashed again"""
        review = _create(review_service)

        deleted = review_service.delete_review(1, review.id)

        assert deleted.id == review.id
        assert review_service.list_reviews(1) == []
        assert review_service.get_review(1, review.id).is_trashed

        with pytest.raises(GoneError):
            review_service.delete_review(1, review.id)

        review_service.delete_review(1, review.id, force=True)
        with pytest.raises(NotFoundError):
            review_service.get_review(1, review.id)

    def test_batch_runs_create_update_delete_in_order(
        self, review_service: ProductReviewService
    ):
        """Test updates run before deletes even for the same review"""
        review = _create(review_service)

        result = review_service.batch_reviews(
            1,
            ReviewBatchRequest(
                delete=[review.id],
                update=[{"id": review.id, "review": "Edited first."}],
                create=[{"review": "New.", "name": "Sam", "email": "sam@example.com"}],
            ),
        )

        assert isinstance(result.update[0], ReviewResponse)
        assert result.update[0].review == "Edited first."
        assert result.delete[0].review == "Edited first."
        assert result.create[0].review == "New."
        assert [r.id for r in review_service.list_reviews(1)] == [result.create[0].id]

    def test_batch_item_errors_do_not_stop_batch(self, review_service: ProductReviewService):
        result = review_service.batch_reviews(
            1,
            ReviewBatchRequest(
                create=[
                    {"review": "No name.", "email": "x@example.com"},
                    {"review": "Ok.", "name": "Ok", "email": "ok@example.com"},
                ],
            ),
        )

        failed, created = result.create
        assert isinstance(failed, BatchItemError)
        assert failed.error.code == "VALIDATION_ERROR"
        assert failed.error.message == "Missing parameter(s): name"
        assert failed.error.data == {"status": 400}
        assert isinstance(created, ReviewResponse)
        assert result.update is None
        assert result.delete is None

    def test_batch_limit(self, memory_store):
        service = ProductReviewService(memory_store, batch_limit=2)

        with pytest.raises(PayloadTooLargeError):
            service.batch_reviews(1, ReviewBatchRequest(delete=[1, 2, 3]))

        result = service.batch_reviews(1, ReviewBatchRequest(delete=[1, 2]))
        assert [item.error.code for item in result.delete] == [
            "REVIEW_INVALID_ID",
            "REVIEW_INVALID_ID",
        ]

    def test_batch_unknown_product(self, review_service: ProductReviewService):
        with pytest.raises(NotFoundError):
            review_service.batch_reviews(99, ReviewBatchRequest(delete=[1]))

    def test_format_list_item_links(self, review_service: ProductReviewService):
        review = _create(review_service)

        item = review_service.format_list_item(review, "http://shop.test/api/v2/")
        data = item.model_dump(by_alias=True)

        assert data["_links"]["self"] == [
            {"href": f"http://shop.test/api/v2/products/1/reviews/{review.id}"}
        ]
        assert data["_links"]["collection"] == [
            {"href": "http://shop.test/api/v2/products/1/reviews"}
        ]
        assert data["_links"]["up"] == [{"href": "http://shop.test/api/v2/products/1"}]

    def test_batch_database_error_is_reported_per_item(self):
        """Test a database failure on one item leaves the rest of the batch running"""

        class FailingStore(InMemoryReviewStore):
            def create(self, product_id, fields):
                if fields["name"] == "Broken":
                    raise OperationalError("INSERT INTO comments", {}, Exception("disk I/O error"))
                return super().create(product_id, fields)

        service = ProductReviewService(FailingStore(product_ids=[1]))
        existing = _create(service)

        result = service.batch_reviews(
            1,
            ReviewBatchRequest(
                create=[
                    {"review": "Lost.", "name": "Broken", "email": "b@example.com"},
                    {"review": "Kept.", "name": "Fine", "email": "f@example.com"},
                ],
                delete=[existing.id],
            ),
        )

        failed, created = result.create
        assert isinstance(failed, BatchItemError)
        assert failed.error.code == "DATABASE_ERROR"
        assert failed.error.data == {"status": 500}
        assert created.review == "Kept."
        assert result.delete[0].id == existing.id
        assert [r.review for r in service.list_reviews(1)] == ["Kept."]
