"""FastAPI routes for the Reviews & Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and
ReviewService calls (internal domain operations).
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, Query

from reviews.api.auth import get_caller, require_admin
from reviews.api.schemas import (
    ProductReviewsResponse,
    ReviewListResponse,
    ReviewResponse,
    SetVisibilityRequest,
    StatusResponse,
    SubmitReviewRequest,
    UpdateReviewRequest,
    VoteRequest,
)
from reviews.review.service import Caller, ReviewPatch, ReviewService

review_router = APIRouter(prefix="/reviews", tags=["reviews"])
admin_router = APIRouter(prefix="/admin/reviews", tags=["admin"])


@lru_cache
def get_review_service() -> ReviewService:
    return ReviewService()


@review_router.post("", status_code=201, response_model=ReviewResponse)
async def submit_review(
    body: SubmitReviewRequest,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """Submit a review for a product from a delivered order."""
    review = service.submit_review(
        caller,
        product_id=body.product_id,
        order_id=body.order_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=body.images,
    )
    return ReviewResponse.from_review(review)


@review_router.get("", response_model=ProductReviewsResponse)
async def list_product_reviews(
    product_id: str = Query(alias="productId"),
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    service: ReviewService = Depends(get_review_service),
) -> ProductReviewsResponse:
    """Visible reviews of a product, with its rating figures."""
    summary = service.product_reviews(product_id, page=page, limit=limit)
    return ProductReviewsResponse.from_summary(summary)


@review_router.get("/mine", response_model=ReviewListResponse)
async def list_my_reviews(
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    """Reviews written by the caller, whatever their status."""
    return ReviewListResponse.from_page(service.customer_reviews(caller, page=page, limit=limit))


@review_router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    body: UpdateReviewRequest,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """Edit a review; status changes need an admin."""
    patch = ReviewPatch(
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=body.images,
        status=body.status,
    )
    review = service.update_review(review_id, caller, patch)
    return ReviewResponse.from_review(review)


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(
    review_id: str,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
) -> StatusResponse:
    """Delete a review (author or admin)."""
    service.delete_review(review_id, caller)
    return StatusResponse(review_id=review_id)


@review_router.post("/{review_id}/votes", status_code=201, response_model=ReviewResponse)
async def vote_on_review(
    review_id: str,
    body: VoteRequest,
    caller: Caller = Depends(get_caller),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """Like or dislike someone else's review."""
    review = service.vote(review_id, caller, body.vote_type)
    return ReviewResponse.from_review(review)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
@admin_router.get("", response_model=ReviewListResponse)
async def list_reviews_for_moderation(
    status: str | None = Query(default=None),
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    caller: Caller = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    """All reviews, optionally narrowed to one status."""
    return ReviewListResponse.from_page(service.moderation_listing(caller, status=status, page=page, limit=limit))


@admin_router.put("", response_model=ReviewResponse)
async def set_review_visibility(
    body: SetVisibilityRequest,
    review_id: str = Query(alias="reviewId"),
    caller: Caller = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    """Show or hide a review."""
    review = service.set_visibility(review_id, caller, body.status)
    return ReviewResponse.from_review(review)


@admin_router.delete("", response_model=StatusResponse)
async def admin_delete_review(
    review_id: str = Query(alias="reviewId"),
    caller: Caller = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
) -> StatusResponse:
    """Delete any review."""
    service.delete_review(review_id, caller)
    return StatusResponse(review_id=review_id)
