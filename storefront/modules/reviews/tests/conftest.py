# storefront/modules/reviews/tests/conftest.py

import pytest
from typing import Generator, Dict
from datetime import datetime
from sqlalchemy.orm import Session
from fastapi.testclient import TestClient

from storefront.core.auth import create_access_token
from storefront.core.config import settings
from storefront.core.database import Base, SessionLocal, engine, get_db
from storefront.modules.reviews.models.review_models import (
    Comment, CommentStatus, CommentType, Product, ProductPurchase
)
from storefront.modules.reviews.services.review_service import ProductReviewService
from storefront.modules.reviews.services.review_store import (
    InMemoryReviewStore, SQLAlchemyReviewStore
)


REVIEW_DATE = datetime(2016, 1, 1, 11, 11, 11)


@pytest.fixture(autouse=True)
def create_test_database():
    """Create test database tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def override_get_db(db_session: Session):
    """Override the get_db dependency for testing."""
    def _override_get_db():
        yield db_session

    return _override_get_db


@pytest.fixture
def client(override_get_db):
    """Create a test client."""
    from storefront.app.main import app

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def api_url():
    """Build URLs under the API prefix."""
    def _url(path: str) -> str:
        return f"{settings.api_prefix}{path}"

    return _url


@pytest.fixture
def absolute_url(api_url):
    """Build absolute URLs as they appear in hypermedia links."""
    def _url(path: str) -> str:
        return f"http://testserver{api_url(path)}"

    return _url


# Store and service fixtures
@pytest.fixture
def review_store(db_session: Session) -> SQLAlchemyReviewStore:
    """Create a database backed review store."""
    return SQLAlchemyReviewStore(db_session)


@pytest.fixture
def memory_store() -> InMemoryReviewStore:
    """Create an in-memory review store holding products 1 and 2."""
    return InMemoryReviewStore(
        product_ids=[1, 2], purchases=[(1, "buyer@example.com")]
    )


@pytest.fixture
def review_service(memory_store: InMemoryReviewStore) -> ProductReviewService:
    """Create a review service on top of the in-memory store."""
    return ProductReviewService(memory_store)


# Data fixtures
@pytest.fixture
def product(db_session: Session) -> Product:
    """Create a simple product."""
    product = Product(name="Dummy Product")
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def other_product(db_session: Session) -> Product:
    """Create a second product."""
    product = Product(name="Other Product")
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


def create_product_review(db: Session, product_id: int, **overrides) -> int:
    """Insert a review comment directly and return its id."""
    values = {
        "product_id": product_id,
        "comment_type": CommentType.REVIEW,
        "status": CommentStatus.APPROVED,
        "author_name": "admin",
        "author_email": "woo@woo.local",
        "content": "Review content here",
        "rating": 0,
        "verified": False,
        "date_created": REVIEW_DATE,
    }
    values.update(overrides)
    comment = Comment(**values)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment.id


@pytest.fixture
def make_review(db_session: Session):
    """Factory fixture creating reviews for a product."""
    def _make(product_id: int, **overrides) -> int:
        return create_product_review(db_session, product_id, **overrides)

    return _make


@pytest.fixture
def purchase(db_session: Session, product: Product) -> ProductPurchase:
    """Record a purchase of the product."""
    purchase = ProductPurchase(product_id=product.id, customer_email="Buyer@Example.com")
    db_session.add(purchase)
    db_session.commit()
    return purchase


# Authentication fixtures
def _auth_headers(user_id: int, username: str, roles) -> Dict[str, str]:
    token = create_access_token(
        {
            "sub": user_id,
            "username": username,
            "email": f"{username}@example.com",
            "roles": roles,
        }
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_admin() -> Dict[str, str]:
    """Authentication headers for an administrator."""
    return _auth_headers(1, "admin", ["admin"])


@pytest.fixture
def auth_headers_shop_manager() -> Dict[str, str]:
    """Authentication headers for a shop manager."""
    return _auth_headers(2, "manager", ["shop_manager"])


@pytest.fixture
def auth_headers_customer() -> Dict[str, str]:
    """Authentication headers for a customer without review permissions."""
    return _auth_headers(3, "customer", ["customer"])
