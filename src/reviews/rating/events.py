"""Domain events for the ProductRating aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, Text

from reviews.domain import reviews


@reviews.event(part_of="ProductRating")
class ProductRatingRecalculated:
    """A product's rating figures were recomputed from its visible reviews."""

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    review_count = Integer(required=True)
    rating_distribution = Text(required=True)  # JSON histogram
    recalculated_at = DateTime(required=True)
