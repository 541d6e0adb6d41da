"""ReviewService, the entry point for every review mutation.

Each operation checks identity and input first, then dispatches a Protean
command. The command's handler changes the review, recomputes the product's
rating figures when the set of visible reviews may have changed, and updates
the author's stats, all in one unit of work. Lost races are dispatched again
by the ``TransactionCoordinator``.

Callers are passed in explicitly (``Caller``); nothing is read from ambient
request state.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from reviews.config import ReviewSettings, get_settings
from reviews.errors import Forbidden, InvalidStatus, Unauthorized
from reviews.rating.product_rating import ProductRating
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.editing import EditReview
from reviews.review.handling import load_review
from reviews.review.moderation import SetReviewVisibility
from reviews.review.removal import DeleteReview
from reviews.review.repository import ReviewPage
from reviews.review.review import (
    COMMENT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Review,
    ReviewStatus,
    check_rating,
    clean_images,
    parse_status,
    review_identity,
)
from reviews.review.submission import SubmitReview
from reviews.review.transaction import TransactionCoordinator
from reviews.review.voting import VoteOnReview

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Caller:
    """Who is asking: the authenticated user's id and whether they are an admin."""

    user_id: str | None = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


@dataclass(frozen=True)
class ReviewPatch:
    """Partial update of a review. ``None`` means "leave as is"."""

    rating: int | None = None
    title: str | None = None
    comment: str | None = None
    images: list[str] | None = field(default=None)
    status: str | None = None

    @property
    def touches_content(self) -> bool:
        return bool(self.content_changes())

    @property
    def touches_status(self) -> bool:
        return self.status is not None

    def content_changes(self) -> dict:
        changes = {
            "rating": self.rating,
            "title": self.title,
            "comment": self.comment,
            "images": self.images,
        }
        return {name: value for name, value in changes.items() if value is not None}

    def validate(self) -> None:
        """Check each supplied field on its own terms."""
        if not self.touches_content and not self.touches_status:
            raise ValidationError({"patch": ["No changes supplied"]})
        if self.rating is not None:
            check_rating(self.rating)
        if self.title is not None and len(self.title.strip()) > TITLE_MAX_LENGTH:
            raise ValidationError({"title": [f"Title cannot exceed {TITLE_MAX_LENGTH} characters"]})
        if self.comment is not None and len(self.comment.strip()) > COMMENT_MAX_LENGTH:
            raise ValidationError({"comment": [f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters"]})
        if self.images is not None:
            clean_images(self.images)
        if self.status is not None:
            parse_status(self.status)


@dataclass(frozen=True)
class ProductReviewSummary:
    """A page of a product's visible reviews with its rating figures."""

    page: ReviewPage
    rating: ProductRating


class ReviewService:
    def __init__(
        self,
        settings: ReviewSettings | None = None,
        coordinator: TransactionCoordinator | None = None,
        updater: ProductRatingUpdater | None = None,
    ):
        self.settings = settings or get_settings()
        self.coordinator = coordinator or TransactionCoordinator(
            max_attempts=self.settings.MAX_TRANSACTION_ATTEMPTS,
            base_delay=self.settings.RETRY_BASE_DELAY,
        )
        self.updater = updater or ProductRatingUpdater()

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def submit_review(
        self,
        caller: Caller,
        product_id,
        order_id,
        rating,
        title=None,
        comment=None,
        images=None,
    ) -> Review:
        self._require_authenticated(caller)
        missing = {
            name: ["This field is required"]
            for name, value in (("product_id", product_id), ("order_id", order_id), ("rating", rating))
            if value in (None, "")
        }
        if missing:
            raise ValidationError(missing)
        check_rating(rating)
        images = clean_images(images)

        # Every submission must update an existing rating record
        self.updater.ensure(product_id)

        review = self.coordinator.run(
            lambda: current_domain.process(
                SubmitReview(
                    review_id=review_identity(caller.user_id, product_id, order_id),
                    product_id=product_id,
                    customer_id=caller.user_id,
                    order_id=order_id,
                    rating=rating,
                    title=title,
                    comment=comment,
                    images=json.dumps(images),
                    status=self.settings.DEFAULT_STATUS,
                    require_verified_purchase=self.settings.REQUIRE_VERIFIED_PURCHASE,
                ),
                asynchronous=False,
            ),
            product_id=str(product_id),
            customer_id=str(caller.user_id),
        )
        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(product_id),
            status=review.status,
            verified_purchase=review.verified_purchase,
        )
        return review

    def update_review(self, review_id, caller: Caller, patch: ReviewPatch) -> Review:
        self._require_authenticated(caller)
        patch.validate()
        changes = patch.content_changes()

        review = self.coordinator.run(
            lambda: current_domain.process(
                EditReview(
                    review_id=str(review_id),
                    actor_id=caller.user_id,
                    actor_is_admin=caller.is_admin,
                    changes=json.dumps(changes) if changes else None,
                    status=patch.status,
                ),
                asynchronous=False,
            ),
            review_id=str(review_id),
        )
        logger.info("Review updated", review_id=str(review_id), status=review.status)
        return review

    def delete_review(self, review_id, caller: Caller) -> Review:
        self._require_authenticated(caller)

        review = self.coordinator.run(
            lambda: current_domain.process(
                DeleteReview(
                    review_id=str(review_id),
                    actor_id=caller.user_id,
                    actor_is_admin=caller.is_admin,
                ),
                asynchronous=False,
            ),
            review_id=str(review_id),
        )
        logger.info(
            "Review deleted",
            review_id=str(review_id),
            product_id=str(review.product_id),
            deleted_by=str(caller.user_id),
        )
        return review

    def set_visibility(self, review_id, caller: Caller, status) -> Review:
        self._require_authenticated(caller)
        if not caller.is_admin:
            raise Forbidden("Only an admin can change a review's visibility", review_id=str(review_id))
        target = parse_status(status)
        if target not in (ReviewStatus.VISIBLE, ReviewStatus.HIDDEN):
            raise InvalidStatus({"status": ["Status must be Visible or Hidden"]})

        review = self.coordinator.run(
            lambda: current_domain.process(
                SetReviewVisibility(review_id=str(review_id), admin_id=caller.user_id, status=target.value),
                asynchronous=False,
            ),
            review_id=str(review_id),
        )
        logger.info("Review visibility set", review_id=str(review_id), status=review.status)
        return review

    def vote(self, review_id, caller: Caller, vote_type) -> Review:
        self._require_authenticated(caller)

        return self.coordinator.run(
            lambda: current_domain.process(
                VoteOnReview(review_id=str(review_id), customer_id=caller.user_id, vote_type=vote_type),
                asynchronous=False,
            ),
            review_id=str(review_id),
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_review(self, review_id) -> Review:
        return load_review(review_id)

    def product_reviews(self, product_id, page=1, limit=None) -> ProductReviewSummary:
        page, limit = self._paging(page, limit)
        reviews_page = current_domain.repository_for(Review).page_by_product(
            product_id, page=page, limit=limit, status=ReviewStatus.VISIBLE.value
        )
        return ProductReviewSummary(page=reviews_page, rating=self.updater.current(product_id))

    def customer_reviews(self, caller: Caller, page=1, limit=None) -> ReviewPage:
        self._require_authenticated(caller)
        page, limit = self._paging(page, limit)
        return current_domain.repository_for(Review).page_by_user(caller.user_id, page=page, limit=limit)

    def moderation_listing(self, caller: Caller, status=None, page=1, limit=None) -> ReviewPage:
        self._require_authenticated(caller)
        if not caller.is_admin:
            raise Forbidden("Only an admin can list reviews for moderation")
        if status is not None:
            status = parse_status(status).value
        page, limit = self._paging(page, limit)
        return current_domain.repository_for(Review).page_by_status(status, page=page, limit=limit)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _require_authenticated(caller: Caller | None) -> None:
        if caller is None or not caller.is_authenticated:
            raise Unauthorized("Authentication required")

    def _paging(self, page, limit) -> tuple[int, int]:
        limit = self.settings.DEFAULT_PAGE_SIZE if limit is None else limit
        errors = {}
        if page < 1:
            errors["page"] = ["Page must be 1 or greater"]
        if not 1 <= limit <= self.settings.MAX_PAGE_SIZE:
            errors["limit"] = [f"Limit must be between 1 and {self.settings.MAX_PAGE_SIZE}"]
        if errors:
            raise ValidationError(errors)
        return page, limit
