"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
They are stored with the aggregate's unit of work and published to other
domains by the Engine.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a review for a purchased product."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text()
    status = String(required=True)
    verified_purchase = String(required=True)  # "True"/"False"
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    """Review content (text, images or rating) changed."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    title = String()
    comment = Text()
    rating = Integer()
    edited_by = Identifier(required=True)
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewVisibilityChanged:
    """An admin showed or hid a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewVoteRecorded:
    """A customer liked or disliked a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    vote_type = String(required=True)
    likes = Integer(required=True)
    dislikes = Integer(required=True)
    voted_at = DateTime(required=True)
