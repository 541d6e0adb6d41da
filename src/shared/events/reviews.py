"""Cross-domain event contracts for Reviews domain events.

These classes define the event shape for consumption by other domains
(e.g., the Catalogue domain to show a product's rating on its page, or the
Notifications domain to thank reviewers). They are registered as external
events via domain.register_external_event() with matching __type__ strings
so Protean's stream deserialization works correctly.

The source-of-truth events are in src/reviews/review/events.py and
src/reviews/rating/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, Integer, String, Text


class ReviewSubmitted(BaseEvent):
    """A customer submitted a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text()
    status = String(required=True)
    verified_purchase = String(required=True)
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


class ProductRatingRecalculated(BaseEvent):
    """A product's average rating and review count changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    review_count = Integer(required=True)
    rating_distribution = Text(required=True)
    recalculated_at = DateTime(required=True)
