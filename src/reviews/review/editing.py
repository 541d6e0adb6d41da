"""EditReview: change a review's content, and (admins only) its status.

Fields left unset keep their value. The product's rating is recomputed only
when the score or the status actually changed.
"""

import json

from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import Forbidden
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.handling import authorize_change, load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_is_admin = Boolean(default=False)
    changes = Text()  # JSON object of content fields to replace
    status = String()


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        review = load_review(command.review_id)
        authorize_change(review, command.actor_id, command.actor_is_admin)
        if command.status is not None and not command.actor_is_admin:
            raise Forbidden("Only an admin can change a review's status", review_id=str(command.review_id))

        changes = json.loads(command.changes) if command.changes else {}

        refresh = False
        if changes:
            refresh = review.edit(edited_by=command.actor_id, **changes)
        if command.status is not None:
            refresh = review.change_status(command.status, changed_by=command.actor_id) or refresh
        current_domain.repository_for(Review).add(review)

        if refresh:
            ProductRatingUpdater().refresh(review.product_id)
        return review
