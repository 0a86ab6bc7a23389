# storefront/modules/reviews/services/review_service.py

from typing import Any, Callable, Dict, List, Optional
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import settings
from storefront.core.exceptions import (
    APIError,
    GoneError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
    summarize_validation_errors,
)
from storefront.modules.reviews.schemas.review_schemas import (
    DATE_FORMAT,
    BatchErrorDetail,
    BatchItemError,
    Link,
    ReviewBatchRequest,
    ReviewBatchResponse,
    ReviewBatchUpdateItem,
    ReviewCreate,
    ReviewLinks,
    ReviewListItem,
    ReviewResponse,
    ReviewUpdate,
)
from storefront.modules.reviews.services.review_store import Review, ReviewStore

logger = logging.getLogger(__name__)


def invalid_product() -> NotFoundError:
    return NotFoundError("Invalid product ID.", error_code="PRODUCT_INVALID_ID")


def invalid_review() -> NotFoundError:
    return NotFoundError("Invalid review ID.", error_code="REVIEW_INVALID_ID")


class ProductReviewService:
    """Product-scoped review operations on top of a ``ReviewStore``"""

    def __init__(self, store: ReviewStore, batch_limit: Optional[int] = None):
        self.store = store
        self.batch_limit = (
            settings.reviews_batch_max_items if batch_limit is None else batch_limit
        )

    def list_reviews(self, product_id: int) -> List[Review]:
        """Approved reviews of a product, oldest first"""

        reviews = self.store.list(product_id)
        if reviews is None:
            raise invalid_product()
        return reviews

    def get_review(self, product_id: int, review_id: int) -> Review:
        """Get a review, which must belong to the product"""

        review = self.store.get(product_id, review_id)
        if review is None:
            raise invalid_review()
        return review

    def create_review(self, product_id: int, review_data: ReviewCreate) -> Review:
        """Create a new approved review"""

        review = self.store.create(product_id, review_data.model_dump())
        if review is None:
            raise invalid_product()
        return review

    def update_review(
        self, product_id: int, review_id: int, update_data: ReviewUpdate
    ) -> Review:
        """Write the supplied fields; omitted fields keep their values"""

        fields = update_data.model_dump(exclude_unset=True, exclude={"id"})
        review = self.store.update(product_id, review_id, fields)
        if review is None:
            raise invalid_review()
        return review

    def delete_review(self, product_id: int, review_id: int, force: bool = False) -> Review:
        """
        Trash a review, or delete it permanently when ``force`` is set.

        Returns the review as it was before deletion.
        """

        review = self.get_review(product_id, review_id)

        if not force and review.is_trashed:
            raise GoneError(
                "The review has already been trashed.", error_code="ALREADY_TRASHED"
            )

        if not self.store.delete(product_id, review_id, force=force):
            raise invalid_review()
        return review

    def batch_reviews(
        self, product_id: int, batch: ReviewBatchRequest
    ) -> ReviewBatchResponse:
        """
        Run a batch of creates, updates and deletes.

        Phases always run in the order create, update, delete, whatever the
        key order of the request; items run in input order. Each item is
        committed on its own and failures are reported in place without
        stopping the batch. Deletes are permanent.
        """

        total = batch.item_count()
        if total > self.batch_limit:
            raise PayloadTooLargeError(
                f"Unable to accept more than {self.batch_limit} items for this request.",
                error_code="BATCH_TOO_LARGE",
            )

        if not self.store.has_product(product_id):
            raise invalid_product()

        result = ReviewBatchResponse()

        if batch.create is not None:
            result.create = [
                self._run_item(0, lambda item=item: self._batch_create(product_id, item))
                for item in batch.create
            ]

        if batch.update is not None:
            result.update = [
                self._run_item(
                    self._item_id(item),
                    lambda item=item: self._batch_update(product_id, item),
                )
                for item in batch.update
            ]

        if batch.delete is not None:
            result.delete = [
                self._run_item(
                    review_id,
                    lambda review_id=review_id: self.delete_review(
                        product_id, review_id, force=True
                    ),
                )
                for review_id in batch.delete
            ]

        logger.info(
            f"Processed review batch for product {product_id}: "
            f"{len(batch.create or [])} create, {len(batch.update or [])} update, "
            f"{len(batch.delete or [])} delete"
        )
        return result

    def _batch_create(self, product_id: int, item: Dict[str, Any]) -> Review:
        return self.create_review(product_id, ReviewCreate.model_validate(item))

    def _batch_update(self, product_id: int, item: Dict[str, Any]) -> Review:
        if "id" not in item:
            raise ValidationError("Missing review ID.", error_code="REVIEW_INVALID_ID")
        update = ReviewBatchUpdateItem.model_validate(item)
        return self.update_review(product_id, update.id, update)

    @staticmethod
    def _item_id(item: Dict[str, Any]) -> int:
        try:
            return int(item.get("id", 0))
        except (TypeError, ValueError):
            return 0

    def _run_item(self, item_id: int, operation: Callable[[], Review]):
        try:
            return self.format_review(operation())
        except APIError as e:
            return self._item_error(item_id, e.error_code or "ERROR", str(e.detail), e.status_code)
        except PydanticValidationError as e:
            message = summarize_validation_errors(e.errors())
            return self._item_error(item_id, "VALIDATION_ERROR", message, 400)
        except SQLAlchemyError as e:
            logger.error(f"Database error in batch item {item_id}: {e}")
            return self._item_error(item_id, "DATABASE_ERROR", "Database error.", 500)

    @staticmethod
    def _item_error(item_id: int, code: str, message: str, status: int) -> BatchItemError:
        logger.warning(f"Batch item {item_id} failed: {code} {message}")
        return BatchItemError(
            id=item_id,
            error=BatchErrorDetail(code=code, message=message, data={"status": status}),
        )

    @staticmethod
    def format_review(review: Review) -> ReviewResponse:
        """Format review for API response"""

        return ReviewResponse(
            id=review.id,
            date_created=review.date_created.strftime(DATE_FORMAT),
            review=review.review,
            rating=review.rating,
            name=review.name,
            email=review.email,
            verified=review.verified,
        )

    @classmethod
    def format_list_item(cls, review: Review, base_url: str) -> ReviewListItem:
        """Format review for collection responses, with hypermedia links"""

        return ReviewListItem(
            **cls.format_review(review).model_dump(),
            links=build_review_links(base_url, review.product_id, review.id),
        )


def product_url(base_url: str, product_id: int) -> str:
    return f"{base_url.rstrip('/')}/products/{product_id}"


def collection_url(base_url: str, product_id: int) -> str:
    return f"{product_url(base_url, product_id)}/reviews"


def item_url(base_url: str, product_id: int, review_id: int) -> str:
    return f"{collection_url(base_url, product_id)}/{review_id}"


def build_review_links(base_url: str, product_id: int, review_id: int) -> ReviewLinks:
    return ReviewLinks(
        self=[Link(href=item_url(base_url, product_id, review_id))],
        collection=[Link(href=collection_url(base_url, product_id))],
        up=[Link(href=product_url(base_url, product_id))],
    )
