"""VoteOnReview: like or dislike someone else's review."""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.handling import load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    vote_type = String(required=True)  # "Like" or "Dislike"


@reviews.command_handler(part_of=Review)
class VoteOnReviewHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command):
        review = load_review(command.review_id)
        review.vote(customer_id=command.customer_id, vote_type=command.vote_type)
        current_domain.repository_for(Review).add(review)
        return review
