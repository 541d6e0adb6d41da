"""Recompute a product's rating figures from its visible reviews."""

import threading

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError

from reviews.rating.product_rating import ProductRating
from reviews.review.review import Review, ReviewStatus

logger = structlog.get_logger(__name__)

# Serializes the creation of first rating records within this process
_CREATE_LOCK = threading.Lock()


class ProductRatingUpdater:
    """Read-then-write over the current review set; idempotent.

    Callers run it inside the same unit of work as the review mutation so
    the figures and the reviews commit together.
    """

    def ensure(self, product_id) -> None:
        """Commit a blank rating record for the product unless one exists.

        Mutations then always update an existing, versioned record, so two
        racing first reviews conflict instead of both inserting.
        """
        repo = current_domain.repository_for(ProductRating)
        with _CREATE_LOCK:
            try:
                repo.get(str(product_id))
                return
            except ObjectNotFoundError:
                pass

            try:
                with UnitOfWork():
                    current_domain.repository_for(ProductRating).add(ProductRating.blank(str(product_id)))
            except IntegrityError:
                # Another process created it between our read and our insert
                logger.debug("Product rating created concurrently", product_id=str(product_id))
                return

        logger.debug("Product rating record created", product_id=str(product_id))

    def refresh(self, product_id) -> ProductRating:
        review_repo = current_domain.repository_for(Review)
        scores = [
            review.rating.score
            for review in review_repo.find_by_product(product_id, status=ReviewStatus.VISIBLE.value)
        ]

        rating_repo = current_domain.repository_for(ProductRating)
        try:
            rating = rating_repo.get(str(product_id))
        except ObjectNotFoundError:
            rating = ProductRating.blank(str(product_id))

        rating.recalculate(scores)
        rating_repo.add(rating)

        logger.debug(
            "Product rating recalculated",
            product_id=str(product_id),
            average_rating=rating.average_rating,
            review_count=rating.review_count,
        )
        return rating

    def current(self, product_id) -> ProductRating:
        """Stored figures for a product; blank when nothing was ever rated."""
        try:
            return current_domain.repository_for(ProductRating).get(str(product_id))
        except ObjectNotFoundError:
            return ProductRating.blank(str(product_id))
