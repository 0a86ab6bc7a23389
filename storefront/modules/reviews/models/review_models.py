# storefront/modules/reviews/models/review_models.py

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from storefront.core.database import Base
from storefront.core.mixins import ProductScopedMixin, TimestampMixin


class CommentType(str, enum.Enum):
    """Kinds of records kept in the shared comments table"""
    REVIEW = "review"
    ORDER_NOTE = "order_note"
    COMMENT = "comment"


class CommentStatus(str, enum.Enum):
    """Visibility status of a comment"""
    APPROVED = "approved"
    HOLD = "hold"
    SPAM = "spam"
    TRASH = "trash"


class Product(Base, TimestampMixin):
    """Catalog product that reviews hang off"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    comments = relationship(
        "Comment", back_populates="product", cascade="all, delete-orphan"
    )
    purchases = relationship(
        "ProductPurchase", back_populates="product", cascade="all, delete-orphan"
    )


class ProductPurchase(Base, ProductScopedMixin, TimestampMixin):
    """A completed purchase, used to flag reviews from verified owners"""
    __tablename__ = "product_purchases"

    id = Column(Integer, primary_key=True, index=True)
    customer_email = Column(String(255), nullable=False, index=True)

    product = relationship("Product", back_populates="purchases")

    __table_args__ = (
        UniqueConstraint("product_id", "customer_email", name="uq_purchase_product_email"),
    )


class Comment(Base, ProductScopedMixin, TimestampMixin):
    """Generic comment record; reviews are rows with comment_type == review"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)

    comment_type = Column(Enum(CommentType), nullable=False, default=CommentType.COMMENT)
    status = Column(Enum(CommentStatus), nullable=False, default=CommentStatus.APPROVED)

    author_name = Column(String(255), nullable=False)
    author_email = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    # Review-only attributes
    rating = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)

    # Local time the comment was posted, without offset
    date_created = Column(DateTime, nullable=False)

    product = relationship("Product", back_populates="comments")

    __table_args__ = (
        Index("idx_comment_product_type_status", "product_id", "comment_type", "status"),
    )
