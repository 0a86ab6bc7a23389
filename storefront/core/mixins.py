from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


class TimestampMixin:
    """Row bookkeeping timestamps, set by the database session"""
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(),
                        onupdate=func.now(), nullable=False)


class ProductScopedMixin:
    """Rows that belong to exactly one catalog product"""

    @declared_attr
    def product_id(cls):
        return Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
