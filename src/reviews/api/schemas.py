"""Pydantic request/response schemas for the Reviews API.

These are separate from the domain model (anti-corruption pattern). The
wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(CamelModel):
    product_id: str
    order_id: str
    rating: int
    title: str | None = None
    comment: str | None = None
    images: list[str] | None = None


class UpdateReviewRequest(CamelModel):
    rating: int | None = None
    title: str | None = None
    comment: str | None = None
    images: list[str] | None = None
    status: str | None = None


class SetVisibilityRequest(CamelModel):
    status: str


class VoteRequest(CamelModel):
    vote_type: str  # "Like" or "Dislike"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewResponse(CamelModel):
    id: str
    product_id: str
    user_id: str
    order_id: str
    rating: int
    title: str | None = None
    comment: str | None = None
    images: list[str] = []
    status: str
    verified_purchase: bool = False
    likes: int = 0
    dislikes: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review) -> ReviewResponse:
        return cls(
            id=str(review.id),
            product_id=str(review.product_id),
            user_id=str(review.customer_id),
            order_id=str(review.order_id),
            rating=review.rating.score,
            title=review.title,
            comment=review.comment,
            images=review.image_urls,
            status=review.status,
            verified_purchase=bool(review.verified_purchase),
            likes=review.likes or 0,
            dislikes=review.dislikes or 0,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )


class ReviewListResponse(CamelModel):
    reviews: list[ReviewResponse]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page) -> ReviewListResponse:
        return cls(
            reviews=[ReviewResponse.from_review(review) for review in page.items],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        )


class ProductReviewsResponse(ReviewListResponse):
    average_rating: float
    review_count: int
    rating_counts: dict[str, int]

    @classmethod
    def from_summary(cls, summary) -> ProductReviewsResponse:
        page = summary.page
        return cls(
            reviews=[ReviewResponse.from_review(review) for review in page.items],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
            average_rating=summary.rating.average_rating,
            review_count=summary.rating.review_count,
            rating_counts=summary.rating.distribution,
        )


class StatusResponse(CamelModel):
    status: str = "ok"
    review_id: str | None = None
