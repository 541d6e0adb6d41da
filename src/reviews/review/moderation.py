"""SetReviewVisibility: an admin shows or hides a review."""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.handling import load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class SetReviewVisibility:
    review_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    status = String(required=True)  # "Visible" or "Hidden"


@reviews.command_handler(part_of=Review)
class SetReviewVisibilityHandler:
    @handle(SetReviewVisibility)
    def set_visibility(self, command):
        review = load_review(command.review_id)
        if review.change_status(command.status, changed_by=command.admin_id):
            current_domain.repository_for(Review).add(review)
            ProductRatingUpdater().refresh(review.product_id)
        return review
