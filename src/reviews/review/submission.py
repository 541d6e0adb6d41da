"""SubmitReview: a customer reviews a product from one of their orders.

The review id is derived from (customer, product, order), so the duplicate
check is a primary-key read. A concurrent submission of the same triple that
slips past the check collides with this one on the product's rating record
and is retried, finding the review on its next attempt.
"""

import json

from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.errors import DuplicateReview, PurchaseNotVerified
from reviews.purchases.lookup import find_purchase, mark_reviewed
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.handling import update_reviewer_stats
from reviews.review.review import Review


@reviews.command(part_of="Review")
class SubmitReview:
    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text()
    images = Text()  # JSON array of image URLs
    status = String(required=True)  # Initial status, from service settings
    require_verified_purchase = Boolean(default=False)


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)
        if repo.find_existing(command.customer_id, command.product_id, command.order_id) is not None:
            raise DuplicateReview({"review": ["You have already reviewed this product for this order"]})

        purchase = find_purchase(command.customer_id, command.product_id, command.order_id)
        if purchase is None and command.require_verified_purchase:
            raise PurchaseNotVerified(
                "No delivered order entitles this customer to review the product",
                product_id=str(command.product_id),
                order_id=str(command.order_id),
            )

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            order_id=command.order_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            images=json.loads(command.images) if command.images else None,
            verified_purchase=purchase is not None,
            status=command.status,
        )
        repo.add(review)
        mark_reviewed(purchase, True)

        ProductRatingUpdater().refresh(command.product_id)
        update_reviewer_stats(command.customer_id, lambda stats: stats.record_review(review.created_at))
        return review
