# storefront/modules/reviews/__init__.py

"""
Product Reviews Module

Exposes the reviews of a product as a REST sub-resource:
- List, get, create, update and delete reviews of a product
- Batch create/update/delete in a single request
- Schema introspection of the review representation

Key Components:
- Models: generic comment records; reviews are comments of type ``review``
- Services: ``ReviewStore`` persistence contract and ``ProductReviewService``
- Routers: ``/products/{product_id}/reviews`` endpoints

Integration Points:
- Permissions: every data operation is checked by the injected permission gate
- Products: reviews are only reachable through an existing product
"""
