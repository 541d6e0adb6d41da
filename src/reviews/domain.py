"""Reviews & Ratings bounded context: product reviews and rating aggregation.

Owns review records, keeps every product's denormalized rating figures in step
with its visible reviews, and tracks per-customer review statistics. Verified
purchases arrive from the Ordering domain as cross-domain events.
"""

import structlog
from protean.domain import Domain

reviews = Domain(name="reviews")

logger = structlog.get_logger(__name__)
