"""Repository for the Review aggregate.

The base repository provides get/add. The queries below serve the review
listings and the rating recomputation, always newest first.
"""

import math
from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError

from reviews.domain import reviews
from reviews.review.review import Review, review_identity

SCAN_PAGE_SIZE = 100


@dataclass(frozen=True)
class ReviewPage:
    """One page of a review listing."""

    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@reviews.repository(part_of=Review)
class ReviewRepository:
    def find_existing(self, customer_id, product_id, order_id) -> Review | None:
        """The review already written for this customer, product and order, if any."""
        try:
            return self.get(review_identity(customer_id, product_id, order_id))
        except ObjectNotFoundError:
            return None

    def find_by_product(self, product_id, status=None):
        """Lazily yield a product's reviews, optionally narrowed to one status."""
        criteria = {"product_id": str(product_id)}
        if status is not None:
            criteria["status"] = status
        yield from self._scan(criteria)

    def find_by_user(self, customer_id, status=None):
        """Lazily yield the reviews a customer wrote."""
        criteria = {"customer_id": str(customer_id)}
        if status is not None:
            criteria["status"] = status
        yield from self._scan(criteria)

    def page_by_product(self, product_id, page=1, limit=10, status=None) -> ReviewPage:
        criteria = {"product_id": str(product_id)}
        if status is not None:
            criteria["status"] = status
        return self._page(criteria, page, limit)

    def page_by_user(self, customer_id, page=1, limit=10) -> ReviewPage:
        return self._page({"customer_id": str(customer_id)}, page, limit)

    def page_by_status(self, status=None, page=1, limit=10) -> ReviewPage:
        return self._page({"status": status} if status else {}, page, limit)

    def remove(self, review: Review) -> None:
        self._dao.delete(review)

    def _query(self, criteria):
        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        return query.order_by("-created_at")

    def _scan(self, criteria):
        offset = 0
        while True:
            results = self._query(criteria).offset(offset).limit(SCAN_PAGE_SIZE).all()
            yield from results.items
            if len(results.items) < SCAN_PAGE_SIZE:
                return
            offset += SCAN_PAGE_SIZE

    def _page(self, criteria, page, limit) -> ReviewPage:
        results = self._query(criteria).offset((page - 1) * limit).limit(limit).all()
        return ReviewPage(items=list(results.items), total=results.total, page=page, limit=limit)
