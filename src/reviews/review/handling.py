"""Helpers shared by the review command handlers."""

from collections.abc import Callable

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from reviews.errors import Forbidden, ReviewNotFound
from reviews.review.review import Review
from reviews.reviewer.stats import ReviewerStats

logger = structlog.get_logger(__name__)


def load_review(review_id) -> Review:
    try:
        return current_domain.repository_for(Review).get(str(review_id))
    except ObjectNotFoundError:
        raise ReviewNotFound({"review_id": [f"Review {review_id} does not exist"]}) from None


def authorize_change(review: Review, actor_id, actor_is_admin) -> None:
    """Only the author or an admin may change a review."""
    if not actor_is_admin and str(review.customer_id) != str(actor_id):
        raise Forbidden("Only the review author or an admin can change this review", review_id=str(review.id))


def update_reviewer_stats(customer_id, change: Callable[[ReviewerStats], None]) -> None:
    """Best effort: a stats failure is logged and never fails the review operation."""
    try:
        repo = current_domain.repository_for(ReviewerStats)
        try:
            stats = repo.get(str(customer_id))
        except ObjectNotFoundError:
            stats = ReviewerStats(customer_id=str(customer_id), total_reviews=0)
        change(stats)
        repo.add(stats)
    except Exception as exc:
        logger.warning(
            "Reviewer stats update failed",
            customer_id=str(customer_id),
            error=str(exc),
        )
