"""ProductRating: the product's denormalized rating figures.

One record per product, rewritten from the product's visible reviews every
time a review mutation changes which reviews count. The record's version
doubles as the per-product serialization point: two units of work that both
recompute the same product conflict on it.
"""

import json
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, Text

from reviews.domain import reviews
from reviews.rating.events import ProductRatingRecalculated

RATING_KEYS = ("1", "2", "3", "4", "5")


def empty_distribution() -> dict[str, int]:
    return {key: 0 for key in RATING_KEYS}


def round_half_up(value, places=1) -> float:
    """Round like ``Number.toFixed``: ties go away from zero, not to even."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def average_of(scores) -> float:
    """Mean of integer scores rounded to one decimal, or 0 when there are none."""
    scores = list(scores)
    if not scores:
        return 0.0
    return round_half_up(Decimal(sum(scores)) / Decimal(len(scores)))


def distribution_of(scores) -> dict[str, int]:
    distribution = empty_distribution()
    for score in scores:
        key = str(score)
        if key in distribution:
            distribution[key] += 1
    return distribution


@reviews.aggregate
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    review_count = Integer(default=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    updated_at = DateTime()

    @invariant.post
    def figures_within_bounds(self):
        if self.review_count is not None and self.review_count < 0:
            raise ValidationError({"review_count": ["Review count cannot be negative"]})
        if self.average_rating is not None and not 0 <= self.average_rating <= 5:
            raise ValidationError({"average_rating": ["Average rating must be between 0 and 5"]})

    @classmethod
    def blank(cls, product_id):
        return cls(
            product_id=product_id,
            average_rating=0.0,
            review_count=0,
            rating_distribution=json.dumps(empty_distribution()),
        )

    @property
    def distribution(self) -> dict[str, int]:
        if not self.rating_distribution:
            return empty_distribution()
        return json.loads(self.rating_distribution)

    def recalculate(self, scores):
        """Replace the figures with those of ``scores``, the visible ratings."""
        scores = list(scores)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.average_rating = average_of(scores)
            self.review_count = len(scores)
            self.rating_distribution = json.dumps(distribution_of(scores))
            self.updated_at = now

        self.raise_(
            ProductRatingRecalculated(
                product_id=str(self.product_id),
                average_rating=self.average_rating,
                review_count=self.review_count,
                rating_distribution=self.rating_distribution,
                recalculated_at=now,
            )
        )
