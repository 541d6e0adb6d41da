"""ReviewerStats: how many reviews a customer has written, and when last."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer

from reviews.domain import reviews


@reviews.aggregate
class ReviewerStats:
    customer_id = Identifier(identifier=True, required=True)
    total_reviews = Integer(default=0)
    last_review_date = DateTime()

    def record_review(self, reviewed_at=None):
        self.total_reviews = (self.total_reviews or 0) + 1
        self.last_review_date = reviewed_at or datetime.now(UTC)

    def forget_review(self):
        self.total_reviews = max(0, (self.total_reviews or 0) - 1)
