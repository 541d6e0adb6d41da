"""DeleteReview: the author or an admin deletes a review for good.

The delivered order becomes reviewable again and the product's rating is
recomputed without it.
"""

from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.purchases.lookup import find_purchase, mark_reviewed
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.handling import authorize_change, load_review, update_reviewer_stats
from reviews.review.review import Review


@reviews.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)


@reviews.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        review = load_review(command.review_id)
        authorize_change(review, command.actor_id, command.actor_is_admin)

        current_domain.repository_for(Review).remove(review)
        mark_reviewed(find_purchase(review.customer_id, review.product_id, review.order_id), False)

        ProductRatingUpdater().refresh(review.product_id)
        update_reviewer_stats(review.customer_id, lambda stats: stats.forget_review())
        return review
