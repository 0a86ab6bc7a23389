# storefront/modules/reviews/routers/reviews_router.py

from fastapi import APIRouter, Body, Depends, Path, Query, Request, Response, status
from sqlalchemy.orm import Session
from typing import List
import logging

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.permissions import (
    ReviewAction,
    require_batch_permission,
    require_review_permission,
)
from storefront.modules.reviews.schemas.review_schemas import (
    MAX_ID,
    ReviewBatchRequest,
    ReviewBatchResponse,
    ReviewCreate,
    ReviewListItem,
    ReviewResponse,
    ReviewSchemaDocument,
    ReviewUpdate,
    build_review_schema,
)
from storefront.modules.reviews.services.review_service import (
    ProductReviewService,
    item_url,
)
from storefront.modules.reviews.services.review_store import (
    ReviewStore,
    SQLAlchemyReviewStore,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products/{product_id}/reviews", tags=["Product Reviews"])


def get_review_store(db: Session = Depends(get_db)) -> ReviewStore:
    return SQLAlchemyReviewStore(db)


def get_review_service(
    store: ReviewStore = Depends(get_review_store),
) -> ProductReviewService:
    return ProductReviewService(store)


def api_base_url(request: Request) -> str:
    """Absolute URL of the API root, used for hypermedia links"""
    return str(request.base_url).rstrip("/") + settings.api_prefix


@router.get(
    "",
    response_model=List[ReviewListItem],
    dependencies=[Depends(require_review_permission(ReviewAction.READ))],
)
async def list_product_reviews(
    request: Request,
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    service: ProductReviewService = Depends(get_review_service),
):
    """List all approved reviews of a product"""

    reviews = service.list_reviews(product_id)
    base_url = api_base_url(request)
    return [service.format_list_item(review, base_url) for review in reviews]


@router.options("", response_model=ReviewSchemaDocument)
async def describe_product_reviews(
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
):
    """Describe the review collection and its schema"""

    return ReviewSchemaDocument(
        namespace=settings.api_prefix.strip("/"),
        methods=["GET", "POST"],
        schema=build_review_schema(),
    )


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_review_permission(ReviewAction.CREATE))],
)
async def create_product_review(
    request: Request,
    response: Response,
    review_data: ReviewCreate = Body(...),
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    service: ProductReviewService = Depends(get_review_service),
):
    """Create a review for a product"""

    review = service.create_review(product_id, review_data)
    response.headers["Location"] = item_url(api_base_url(request), product_id, review.id)
    return service.format_review(review)


@router.post(
    "/batch",
    response_model=ReviewBatchResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_batch_permission)],
)
async def batch_product_reviews(
    batch: ReviewBatchRequest = Body(...),
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    service: ProductReviewService = Depends(get_review_service),
):
    """Create, update and delete reviews of a product in one request"""

    return service.batch_reviews(product_id, batch)


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    dependencies=[Depends(require_review_permission(ReviewAction.READ))],
)
async def get_product_review(
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    review_id: int = Path(..., ge=0, le=MAX_ID, description="Review ID"),
    service: ProductReviewService = Depends(get_review_service),
):
    """Get a single review of a product"""

    return service.format_review(service.get_review(product_id, review_id))


@router.api_route(
    "/{review_id}",
    methods=["PUT", "PATCH"],
    response_model=ReviewResponse,
    dependencies=[Depends(require_review_permission(ReviewAction.UPDATE))],
)
async def update_product_review(
    update_data: ReviewUpdate = Body(...),
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    review_id: int = Path(..., ge=0, le=MAX_ID, description="Review ID"),
    service: ProductReviewService = Depends(get_review_service),
):
    """Update the supplied fields of a review"""

    review = service.update_review(product_id, review_id, update_data)
    return service.format_review(review)


@router.delete(
    "/{review_id}",
    response_model=ReviewResponse,
    dependencies=[Depends(require_review_permission(ReviewAction.DELETE))],
)
async def delete_product_review(
    product_id: int = Path(..., ge=0, le=MAX_ID, description="Product ID"),
    review_id: int = Path(..., ge=0, le=MAX_ID, description="Review ID"),
    force: bool = Query(False, description="Whether to bypass trash and force deletion."),
    service: ProductReviewService = Depends(get_review_service),
):
    """Trash a review, or delete it permanently with ``force=true``"""

    review = service.delete_review(product_id, review_id, force=force)
    return service.format_review(review)
