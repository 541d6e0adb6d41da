"""Inbound cross-domain event handler: Reviews reacts to Ordering events.

Listens for OrderDelivered events from the Ordering domain to populate
the VerifiedPurchases projection, which the review service consults to flag
(or require) verified purchases.

Cross-domain events are imported from shared.events.ordering and registered
as external events via reviews.register_external_event().
"""

import json
import uuid

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.ordering import OrderDelivered

from reviews.domain import reviews
from reviews.purchases.verified_purchases import VerifiedPurchases
from reviews.review.review import Review

logger = structlog.get_logger(__name__)

# Register external event so Protean can deserialize it
reviews.register_external_event(OrderDelivered, "Ordering.OrderDelivered.v1")


@reviews.event_handler(part_of=Review, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to track verified purchases."""

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        """Record one verified purchase per delivered product."""
        if not event.customer_id:
            logger.info(
                "OrderDelivered missing customer_id, skipping verified purchase",
                order_id=str(event.order_id),
            )
            return

        if not event.items:
            logger.info(
                "OrderDelivered missing items, cannot create per-product records",
                order_id=str(event.order_id),
            )
            return

        vp_repo = current_domain.repository_for(VerifiedPurchases)
        for item in json.loads(event.items):
            product_id = item.get("product_id")
            if not product_id:
                logger.warning(
                    "Delivered item without product_id, skipping",
                    order_id=str(event.order_id),
                    item=item,
                )
                continue

            existing = (
                vp_repo._dao.query.filter(
                    customer_id=str(event.customer_id),
                    product_id=str(product_id),
                    order_id=str(event.order_id),
                )
                .all()
                .first
            )
            if existing:
                continue

            vp_repo.add(
                VerifiedPurchases(
                    vp_id=str(uuid.uuid4()),
                    customer_id=str(event.customer_id),
                    product_id=str(product_id),
                    variant_id=str(item.get("variant_id") or ""),
                    order_id=str(event.order_id),
                    delivered_at=event.delivered_at,
                    reviewed=False,
                )
            )
