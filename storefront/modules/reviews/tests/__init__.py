# storefront/modules/reviews/tests/__init__.py

"""
Test suite for the product reviews module.

- API tests drive the HTTP surface through FastAPI's TestClient
- Service tests run ``ProductReviewService`` against the in-memory store
- Store tests cover the SQLAlchemy store against SQLite
"""
