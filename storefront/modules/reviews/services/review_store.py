# storefront/modules/reviews/services/review_store.py

"""
Review persistence.

``ReviewStore`` is the contract the review service depends on. Missing
products or reviews are reported with ``None``/``False`` rather than
exceptions, leaving the HTTP mapping to the caller.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from itertools import count
from typing import Any, Dict, List, Optional, Set, Tuple
import logging
import threading

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.modules.reviews.models.review_models import (
    Comment,
    CommentStatus,
    CommentType,
    Product,
    ProductPurchase,
)

logger = logging.getLogger(__name__)


# Client-writable review fields and the comment columns behind them
FIELD_COLUMNS = {
    "review": "content",
    "name": "author_name",
    "email": "author_email",
    "rating": "rating",
}


@dataclass
class Review:
    """A product review as seen by the service layer"""

    id: int
    product_id: int
    review: str
    rating: int
    name: str
    email: str
    date_created: datetime
    verified: bool = False
    status: CommentStatus = CommentStatus.APPROVED

    @property
    def is_trashed(self) -> bool:
        return self.status == CommentStatus.TRASH


def current_timestamp() -> datetime:
    """Local wall-clock time at second precision, no offset."""
    return datetime.now().replace(microsecond=0)


class ReviewStore:
    """Persistence contract for product reviews."""

    def has_product(self, product_id: int) -> bool:
        raise NotImplementedError

    def list(self, product_id: int) -> Optional[List[Review]]:
        """Approved reviews of the product, or None if the product is missing."""
        raise NotImplementedError

    def get(self, product_id: int, review_id: int) -> Optional[Review]:
        raise NotImplementedError

    def create(self, product_id: int, fields: Dict[str, Any]) -> Optional[Review]:
        raise NotImplementedError

    def update(
        self, product_id: int, review_id: int, fields: Dict[str, Any]
    ) -> Optional[Review]:
        raise NotImplementedError

    def delete(self, product_id: int, review_id: int, force: bool = False) -> bool:
        """Trash the review, or remove it permanently when ``force`` is set."""
        raise NotImplementedError


class SQLAlchemyReviewStore(ReviewStore):
    """Reviews stored as rows of the shared ``comments`` table"""

    def __init__(self, db: Session):
        self.db = db

    def has_product(self, product_id: int) -> bool:
        return self.db.get(Product, product_id) is not None

    def list(self, product_id: int) -> Optional[List[Review]]:
        if not self.has_product(product_id):
            return None

        comments = (
            self._reviews_query(product_id)
            .filter(Comment.status == CommentStatus.APPROVED)
            .order_by(Comment.id.asc())
            .all()
        )
        return [self._to_review(comment) for comment in comments]

    def get(self, product_id: int, review_id: int) -> Optional[Review]:
        comment = self._get_comment(product_id, review_id)
        return self._to_review(comment) if comment else None

    def create(self, product_id: int, fields: Dict[str, Any]) -> Optional[Review]:
        if not self.has_product(product_id):
            return None

        comment = Comment(
            product_id=product_id,
            comment_type=CommentType.REVIEW,
            status=CommentStatus.APPROVED,
            date_created=current_timestamp(),
            rating=0,
            verified=self._is_verified_owner(product_id, fields.get("email")),
        )
        self._apply_fields(comment, fields)

        try:
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating review for product {product_id}: {e}")
            raise

        logger.info(f"Created review {comment.id} for product {product_id}")
        return self._to_review(comment)

    def update(
        self, product_id: int, review_id: int, fields: Dict[str, Any]
    ) -> Optional[Review]:
        comment = self._get_comment(product_id, review_id)
        if comment is None:
            return None

        self._apply_fields(comment, fields)

        try:
            self.db.commit()
            self.db.refresh(comment)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating review {review_id}: {e}")
            raise

        logger.info(f"Updated review {review_id} ({', '.join(sorted(fields)) or 'no fields'})")
        return self._to_review(comment)

    def delete(self, product_id: int, review_id: int, force: bool = False) -> bool:
        comment = self._get_comment(product_id, review_id)
        if comment is None:
            return False

        try:
            if force:
                self.db.delete(comment)
            else:
                comment.status = CommentStatus.TRASH
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting review {review_id}: {e}")
            raise

        logger.info(f"{'Deleted' if force else 'Trashed'} review {review_id}")
        return True

    def _reviews_query(self, product_id: int):
        return self.db.query(Comment).filter(
            Comment.product_id == product_id,
            Comment.comment_type == CommentType.REVIEW,
        )

    def _get_comment(self, product_id: int, review_id: int) -> Optional[Comment]:
        return self._reviews_query(product_id).filter(Comment.id == review_id).first()

    def _is_verified_owner(self, product_id: int, email: Optional[str]) -> bool:
        if not email:
            return False
        purchase = (
            self.db.query(ProductPurchase)
            .filter(
                ProductPurchase.product_id == product_id,
                func.lower(ProductPurchase.customer_email) == email.lower(),
            )
            .first()
        )
        return purchase is not None

    @staticmethod
    def _apply_fields(comment: Comment, fields: Dict[str, Any]) -> None:
        for field, column in FIELD_COLUMNS.items():
            if field in fields and fields[field] is not None:
                setattr(comment, column, fields[field])

    @staticmethod
    def _to_review(comment: Comment) -> Review:
        return Review(
            id=comment.id,
            product_id=comment.product_id,
            review=comment.content,
            rating=comment.rating or 0,
            name=comment.author_name,
            email=comment.author_email,
            date_created=comment.date_created,
            verified=bool(comment.verified),
            status=comment.status,
        )


class InMemoryReviewStore(ReviewStore):
    """Dictionary backed store; ids are handed out atomically under a lock"""

    def __init__(self, product_ids=(), purchases=()):
        self._lock = threading.Lock()
        self._ids = count(1)
        self._products: Set[int] = set(product_ids)
        self._purchases: Set[Tuple[int, str]] = {
            (product_id, email.lower()) for product_id, email in purchases
        }
        self._reviews: Dict[int, Review] = {}

    def has_product(self, product_id: int) -> bool:
        return product_id in self._products

    def list(self, product_id: int) -> Optional[List[Review]]:
        with self._lock:
            if product_id not in self._products:
                return None
            return [
                replace(review)
                for review_id, review in sorted(self._reviews.items())
                if review.product_id == product_id
                and review.status == CommentStatus.APPROVED
            ]

    def get(self, product_id: int, review_id: int) -> Optional[Review]:
        with self._lock:
            review = self._reviews.get(review_id)
            if review is None or review.product_id != product_id:
                return None
            return replace(review)

    def create(self, product_id: int, fields: Dict[str, Any]) -> Optional[Review]:
        with self._lock:
            if product_id not in self._products:
                return None
            email = fields["email"]
            review = Review(
                id=next(self._ids),
                product_id=product_id,
                review=fields["review"],
                rating=fields.get("rating") or 0,
                name=fields["name"],
                email=email,
                date_created=current_timestamp(),
                verified=(product_id, email.lower()) in self._purchases,
            )
            self._reviews[review.id] = review
            return replace(review)

    def update(
        self, product_id: int, review_id: int, fields: Dict[str, Any]
    ) -> Optional[Review]:
        with self._lock:
            review = self._reviews.get(review_id)
            if review is None or review.product_id != product_id:
                return None
            changes = {
                field: value
                for field, value in fields.items()
                if field in FIELD_COLUMNS and value is not None
            }
            self._reviews[review_id] = replace(review, **changes)
            return replace(self._reviews[review_id])

    def delete(self, product_id: int, review_id: int, force: bool = False) -> bool:
        with self._lock:
            review = self._reviews.get(review_id)
            if review is None or review.product_id != product_id:
                return False
            if force:
                del self._reviews[review_id]
            else:
                self._reviews[review_id] = replace(review, status=CommentStatus.TRASH)
            return True
